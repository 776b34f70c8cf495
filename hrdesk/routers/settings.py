from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.routers.deps import get_membership
from hrdesk.schemas.company import (
    CompanyInfo,
    CompanyUpdateResult,
    FieldOptionCreate,
    FieldOptionDelete,
    FieldOptionResponse,
    FieldOptionUpdate,
    HolidayCreate,
    HolidayResponse,
    HolidayUpdate,
    PermissionsResponse,
    PermissionUpdate,
)
from hrdesk.schemas.leave import LeavePolicyCreate, LeavePolicyResponse, LeaveTypeCreate, LeaveTypeResponse
from hrdesk.services.company_settings import CompanySettingsService
from hrdesk.services.documents import store_upload
from hrdesk.services.membership import ResolvedMembership
from hrdesk.services.storage import BlobStorage, get_blob_storage

router = APIRouter(
    prefix="/companies/{company_id}/settings",
    tags=["settings"]
)


# --- employee field options ---

@router.get("/field-options", response_model=ApiResponse[Dict[str, List[FieldOptionResponse]]])
def get_field_options(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    grouped = CompanySettingsService(db, membership).field_options()
    return ApiResponse.ok({k: [FieldOptionResponse.model_validate(o) for o in v] for k, v in grouped.items()})


@router.post("/field-options", response_model=ApiResponse[FieldOptionResponse], status_code=201)
def add_field_option(
    data: FieldOptionCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    option = CompanySettingsService(db, membership).add_field_option(data.field_name, data.field_value)
    return ApiResponse.ok(FieldOptionResponse.model_validate(option))


@router.put("/field-options", response_model=ApiResponse[FieldOptionResponse])
def update_field_option(
    data: FieldOptionUpdate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    option = CompanySettingsService(db, membership).rename_field_option(data.field_name, data.field_id, data.field_value)
    return ApiResponse.ok(FieldOptionResponse.model_validate(option))


@router.delete("/field-options", response_model=ApiResponse[dict])
def delete_field_option(
    data: FieldOptionDelete,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    CompanySettingsService(db, membership).remove_field_option(data.field_name, data.field_id)
    return ApiResponse.ok({})


# --- company info ---

@router.get("/company", response_model=ApiResponse[CompanyInfo])
def get_company_info(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    return ApiResponse.ok(CompanyInfo.model_validate(CompanySettingsService(db, membership).company_info(), from_attributes=True))


@router.put("/company", response_model=ApiResponse[CompanyUpdateResult])
def update_company_info(
    name: Optional[str] = Form(None),
    employee_count: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    owner_profile_id: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    """Multipart form; `image` replaces the logo, `owner_profile_id` transfers ownership."""
    store_logo = None
    if image is not None:
        def store_logo() -> str:
            return store_upload(storage, image.filename, image.file.read(), image.content_type or "")

    result = CompanySettingsService(db, membership).update_company(
        name=name,
        employee_count=employee_count,
        country=country,
        owner_profile_id=owner_profile_id,
        store_logo=store_logo,
    )
    return ApiResponse.ok(CompanyUpdateResult.model_validate(result, from_attributes=True))


# --- permissions ---

@router.get("/permissions", response_model=ApiResponse[PermissionsResponse])
def get_permissions(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    return ApiResponse.ok(PermissionsResponse(permissions=CompanySettingsService(db, membership).permissions()))


@router.put("/permissions", response_model=ApiResponse[PermissionsResponse])
def update_permissions(
    data: PermissionUpdate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    permissions = CompanySettingsService(db, membership).update_permission(data)
    return ApiResponse.ok(PermissionsResponse(permissions=permissions))


# --- holidays ---

@router.post("/holidays", response_model=ApiResponse[HolidayResponse], status_code=201)
def add_holiday(
    data: HolidayCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    holiday = CompanySettingsService(db, membership).add_holiday(data)
    return ApiResponse.ok(HolidayResponse.model_validate(holiday))


@router.get("/holidays", response_model=ApiResponse[List[HolidayResponse]])
def get_holidays(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    holidays = CompanySettingsService(db, membership).holidays()
    return ApiResponse.ok([HolidayResponse.model_validate(h) for h in holidays])


@router.put("/holidays/{holiday_id}", response_model=ApiResponse[HolidayResponse])
def update_holiday(
    holiday_id: int,
    data: HolidayUpdate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    holiday = CompanySettingsService(db, membership).update_holiday(holiday_id, data)
    return ApiResponse.ok(HolidayResponse.model_validate(holiday))


@router.delete("/holidays/{holiday_id}", response_model=ApiResponse[dict])
def delete_holiday(
    holiday_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    CompanySettingsService(db, membership).delete_holiday(holiday_id)
    return ApiResponse.ok({})


# --- leave types and policies ---

@router.get("/leave-types", response_model=ApiResponse[List[LeaveTypeResponse]])
def get_leave_types(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    leave_types = CompanySettingsService(db, membership).leave_types()
    return ApiResponse.ok([LeaveTypeResponse.model_validate(lt) for lt in leave_types])


@router.post("/leave-types", response_model=ApiResponse[LeaveTypeResponse], status_code=201)
def create_leave_type(
    data: LeaveTypeCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    leave_type = CompanySettingsService(db, membership).create_leave_type(data)
    return ApiResponse.ok(LeaveTypeResponse.model_validate(leave_type))


@router.get("/leave-policies", response_model=ApiResponse[List[LeavePolicyResponse]])
def get_leave_policies(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    policies = CompanySettingsService(db, membership).leave_policies()
    return ApiResponse.ok([LeavePolicyResponse.model_validate(p) for p in policies])


@router.post("/leave-policies", response_model=ApiResponse[LeavePolicyResponse], status_code=201)
def create_leave_policy(
    data: LeavePolicyCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    policy = CompanySettingsService(db, membership).create_leave_policy(data)
    return ApiResponse.ok(LeavePolicyResponse.model_validate(policy))
