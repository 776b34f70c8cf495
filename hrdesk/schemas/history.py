"""
Typed payloads for the closed set of employee history collections.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional


class HistoryEntryBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    effective_date: date


class JobInformationIn(HistoryEntryBase):
    job_title: Optional[str] = None
    department: Optional[str] = None
    division: Optional[str] = None
    location: Optional[str] = None
    reports_to_id: Optional[int] = None


class EmploymentStatusIn(HistoryEntryBase):
    status: str = Field(min_length=1)
    comment: Optional[str] = None


class CompensationIn(HistoryEntryBase):
    pay_rate: float = Field(ge=0)
    pay_rate_unit: Optional[str] = None
    pay_type: Optional[str] = None
    pay_schedule: Optional[str] = None
    reason: Optional[str] = None


class EducationIn(HistoryEntryBase):
    degree: Optional[str] = None
    institution: str = Field(min_length=1)
    major: Optional[str] = None
    gpa: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class VisaInfoIn(HistoryEntryBase):
    visa_type: str = Field(min_length=1)
    issuing_country: Optional[str] = None
    issued_date: Optional[date] = None
    expiration_date: Optional[date] = None
    note: Optional[str] = None


class BonusIn(HistoryEntryBase):
    amount: float
    reason: Optional[str] = None


class AssetIn(HistoryEntryBase):
    category: str = Field(min_length=1)
    description: Optional[str] = None
    serial_number: Optional[str] = None
    assigned_date: Optional[date] = None
    returned_date: Optional[date] = None


# Responses reuse the input shape plus identity columns

class JobInformationOut(JobInformationIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None


class EmploymentStatusOut(EmploymentStatusIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None


class CompensationOut(CompensationIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None


class EducationOut(EducationIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None


class VisaInfoOut(VisaInfoIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None


class BonusOut(BonusIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None


class AssetOut(AssetIn):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: Optional[datetime] = None
