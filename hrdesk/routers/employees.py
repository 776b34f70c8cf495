from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, File, UploadFile
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.routers.deps import get_membership
from hrdesk.schemas.company import RequiredApproverResponse
from hrdesk.schemas.employee import (
    EmployeeCreate,
    EmployeeDetail,
    EmployeeName,
    EmployeeResponse,
    OrgChartNode,
    PersonalInfoUpdate,
)
from hrdesk.services.company_settings import CompanySettingsService
from hrdesk.services.documents import store_upload
from hrdesk.services.employee_history import EmployeeHistoryService
from hrdesk.services.employees import EmployeeService
from hrdesk.services.membership import ResolvedMembership
from hrdesk.services.storage import BlobStorage, get_blob_storage

router = APIRouter(
    prefix="/companies/{company_id}/employees",
    tags=["employees"]
)


@router.post("", response_model=ApiResponse[EmployeeResponse], status_code=201)
def create_employee(
    data: EmployeeCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    employee = EmployeeService(db, membership).create(data)
    return ApiResponse.ok(EmployeeResponse.model_validate(employee))


@router.get("", response_model=ApiResponse[List[EmployeeDetail]])
def list_employees(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    return ApiResponse.ok(EmployeeService(db, membership).list_profiles())


@router.get("/names", response_model=ApiResponse[List[EmployeeName]])
def list_employee_names(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    employees = EmployeeService(db, membership).list_names()
    return ApiResponse.ok([EmployeeName.model_validate(e) for e in employees])


@router.get("/org-chart", response_model=ApiResponse[List[OrgChartNode]])
def organization_chart(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    return ApiResponse.ok(EmployeeService(db, membership).org_chart())


@router.get("/{employee_id}", response_model=ApiResponse[EmployeeDetail])
def get_employee_info(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(EmployeeService(db, membership).get(employee_id))


@router.delete("/{employee_id}", response_model=ApiResponse[dict])
def delete_employee(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    EmployeeService(db, membership).delete(employee_id)
    return ApiResponse.ok({})


@router.put("/{employee_id}/personal-info", response_model=ApiResponse[EmployeeResponse])
def update_personal_info(
    employee_id: int,
    data: PersonalInfoUpdate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    employee = EmployeeService(db, membership).update_personal_info(employee_id, data)
    return ApiResponse.ok(EmployeeResponse.model_validate(employee))


@router.post("/{employee_id}/profile-picture", response_model=ApiResponse[EmployeeResponse])
def upload_profile_picture(
    employee_id: int,
    image: UploadFile = File(...),
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    def store() -> str:
        return store_upload(storage, image.filename, image.file.read(), image.content_type or "")

    employee = EmployeeService(db, membership).set_profile_picture(employee_id, store)
    return ApiResponse.ok(EmployeeResponse.model_validate(employee))


# --- history collections ---

@router.post("/{employee_id}/history/{collection}", response_model=ApiResponse[Dict[str, Any]], status_code=201)
def add_history_entry(
    employee_id: int,
    collection: str,
    value: Dict[str, Any] = Body(...),
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    entry = EmployeeHistoryService(db, membership).add(employee_id, collection, value)
    return ApiResponse.ok(entry.model_dump(mode="json"))


@router.put("/{employee_id}/history/{collection}/{entry_id}", response_model=ApiResponse[Dict[str, Any]])
def update_history_entry(
    employee_id: int,
    collection: str,
    entry_id: int,
    value: Dict[str, Any] = Body(...),
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    entry = EmployeeHistoryService(db, membership).update(employee_id, collection, entry_id, value)
    return ApiResponse.ok(entry.model_dump(mode="json"))


@router.delete("/{employee_id}/history/{collection}/{entry_id}", response_model=ApiResponse[dict])
def delete_history_entry(
    employee_id: int,
    collection: str,
    entry_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    EmployeeHistoryService(db, membership).remove(employee_id, collection, entry_id)
    return ApiResponse.ok({})


@router.get("/{employee_id}/approvers/{category}", response_model=ApiResponse[RequiredApproverResponse])
def required_approver(
    employee_id: int,
    category: str,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    approver = CompanySettingsService(db, membership).required_approver(category, employee_id)
    return ApiResponse.ok(RequiredApproverResponse(
        category=category,
        approver=approver.kind,
        employee_profile_id=approver.employee_profile_id,
    ))
