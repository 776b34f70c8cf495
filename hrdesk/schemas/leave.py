from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import List, Optional


class DayHours(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    hours: float = Field(gt=0, le=24)


class TimeOffRequestCreate(BaseModel):
    leave_type_id: int
    start_date: date
    end_date: Optional[date] = None
    day_hours: List[DayHours] = Field(min_length=1)
    note: Optional[str] = None

    @model_validator(mode="after")
    def check_range(self):
        end = self.end_date or self.start_date
        if end < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        for day in self.day_hours:
            if not (self.start_date <= day.date <= end):
                raise ValueError(f"{day.date} is outside the requested date range")
        return self


class TimeOffDecision(BaseModel):
    status: str


class LeaveBalanceAdjustment(BaseModel):
    leave_type_id: int
    hours: float


class PublicHolidayCreate(BaseModel):
    date: date
    name: str = Field(min_length=1)


class TimeOffRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_profile_id: int
    leave_type_id: Optional[int] = None
    leave_type_name: Optional[str] = None
    start_date: date
    end_date: date
    day_hours: List[DayHours] = []
    total_hours: float
    note: Optional[str] = None
    status: str
    requested_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by_id: Optional[int] = None

    @classmethod
    def from_model(cls, request) -> "TimeOffRequestResponse":
        return cls(
            id=request.id,
            employee_profile_id=request.employee_profile_id,
            leave_type_id=request.leave_type_id,
            leave_type_name=request.leave_type.name if request.leave_type else None,
            start_date=request.start_date,
            end_date=request.end_date,
            day_hours=[DayHours.model_validate(d) for d in request.days],
            total_hours=request.total_hours,
            note=request.note,
            status=request.status,
            requested_at=request.requested_at,
            approved_at=request.approved_at,
            approved_by_id=request.approved_by_id,
        )


class TimeOffRequestsPartition(BaseModel):
    scheduled: List[TimeOffRequestResponse]
    history: List[TimeOffRequestResponse]


class LeaveDetail(BaseModel):
    leave_type_id: int
    leave_name: str
    total_hours: float
    remaining_hours: float
    scheduled_hours: float


class PublicHolidayResult(BaseModel):
    created: int
    failed_employee_ids: List[int] = []


class LeaveTypeCreate(BaseModel):
    name: str = Field(min_length=1)
    default_hours: float = Field(default=0.0, ge=0)


class LeaveTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    default_hours: float


class LeavePolicyCreate(BaseModel):
    name: str = Field(min_length=1)
    leave_type_ids: List[int] = []


class LeavePolicyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    leave_types: List[LeaveTypeResponse] = []
