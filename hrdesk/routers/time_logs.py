from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.routers.deps import get_membership
from hrdesk.schemas.time_log import TimeLogAction, TimeLogResponse, WorkLogResponse
from hrdesk.services.membership import ResolvedMembership
from hrdesk.services.time_clock import TimeClockService

router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_id}/time-logs",
    tags=["time-logs"]
)


@router.post("", response_model=ApiResponse[TimeLogResponse])
def update_time_log(
    employee_id: int,
    data: TimeLogAction,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    """Apply one of clock-in, start-break, end-break or clock-out."""
    row = TimeClockService(db, membership).update_time_log(employee_id, data.action)
    return ApiResponse.ok(TimeLogResponse.model_validate(row))


@router.get("", response_model=ApiResponse[List[TimeLogResponse]])
def get_time_logs(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    rows = TimeClockService(db, membership).list_time_logs(employee_id)
    return ApiResponse.ok([TimeLogResponse.model_validate(r) for r in rows])


@router.get("/work-log", response_model=ApiResponse[WorkLogResponse])
def get_work_log(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok(TimeClockService(db, membership).work_log(employee_id))


@router.get("/state", response_model=ApiResponse[dict])
def get_clock_state(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    return ApiResponse.ok({"state": TimeClockService(db, membership).clock_state(employee_id).value})
