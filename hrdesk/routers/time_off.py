from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.routers.deps import get_membership
from hrdesk.schemas.employee import LeaveBalanceOut
from hrdesk.schemas.leave import (
    LeaveBalanceAdjustment,
    LeaveDetail,
    PublicHolidayCreate,
    PublicHolidayResult,
    TimeOffDecision,
    TimeOffRequestCreate,
    TimeOffRequestResponse,
    TimeOffRequestsPartition,
)
from hrdesk.services.leave_ledger import LeaveLedger
from hrdesk.services.membership import ResolvedMembership

router = APIRouter(
    prefix="/companies/{company_id}",
    tags=["time-off"]
)


@router.post(
    "/employees/{employee_id}/time-off",
    response_model=ApiResponse[TimeOffRequestResponse],
    status_code=201,
)
def request_time_off(
    employee_id: int,
    data: TimeOffRequestCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(LeaveLedger(db, membership).request_time_off(employee_id, data))


@router.get("/employees/{employee_id}/time-off", response_model=ApiResponse[TimeOffRequestsPartition])
def get_time_off_requests(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(LeaveLedger(db, membership).get_time_off_requests(employee_id))


@router.get("/employees/{employee_id}/time-off/details", response_model=ApiResponse[List[LeaveDetail]])
def get_time_off_details(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(LeaveLedger(db, membership).get_time_off_details(employee_id))


@router.delete("/employees/{employee_id}/time-off/{request_id}", response_model=ApiResponse[dict])
def delete_time_off_request(
    employee_id: int,
    request_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    LeaveLedger(db, membership).delete_time_off_request(employee_id, request_id)
    return ApiResponse.ok({})


@router.put("/time-off/{request_id}", response_model=ApiResponse[TimeOffRequestResponse])
def approve_deny_time_off(
    request_id: int,
    data: TimeOffDecision,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(LeaveLedger(db, membership).approve_deny_time_off(request_id, data.status))


@router.put("/employees/{employee_id}/leave-balance", response_model=ApiResponse[List[LeaveBalanceOut]])
def update_leave_balance(
    employee_id: int,
    data: LeaveBalanceAdjustment,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    balances = LeaveLedger(db, membership).update_leave_balance(employee_id, data.leave_type_id, data.hours)
    return ApiResponse.ok([LeaveBalanceOut.model_validate(b) for b in balances])


@router.post("/public-holidays", response_model=ApiResponse[PublicHolidayResult], status_code=201)
def add_public_holiday(
    data: PublicHolidayCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(LeaveLedger(db, membership).add_public_holiday(data.date, data.name))
