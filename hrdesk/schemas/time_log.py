from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class TimeLogAction(BaseModel):
    action: str


class TimeLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_profile_id: int
    date: datetime
    clock_in: datetime
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    clock_out: Optional[datetime] = None


class WorkTotals(BaseModel):
    """Durations in milliseconds."""
    work_ms: int
    break_ms: int


class WorkLogResponse(BaseModel):
    current_work_log: Optional[TimeLogResponse] = None
    state: str
    daily: WorkTotals
    weekly: WorkTotals
