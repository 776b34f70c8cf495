from pydantic import BaseModel, ConfigDict, Field
import datetime as dt
from datetime import date, datetime
from typing import Dict, List, Optional

from hrdesk.schemas.employee import EmployeeName
from hrdesk.services.approvers import ApproverKind, ApproverPolicy


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    domain: str
    employee_count: str
    country: str
    logo_url: Optional[str] = None


class CompanyInfo(BaseModel):
    company: CompanyResponse
    employees: List[EmployeeName]
    owner_profile_id: Optional[int] = None


class CompanyUpdateResult(BaseModel):
    company: CompanyResponse
    owner_profile_id: Optional[int] = None


class PermissionUpdate(BaseModel):
    permission_name: str
    approver: ApproverKind
    specific_person_id: Optional[int] = None


class PermissionsResponse(BaseModel):
    permissions: Dict[str, ApproverPolicy]


class RequiredApproverResponse(BaseModel):
    category: str
    approver: ApproverKind
    employee_profile_id: Optional[int] = None


class FieldOptionCreate(BaseModel):
    field_name: str
    field_value: str = Field(min_length=1)


class FieldOptionUpdate(BaseModel):
    field_name: str
    field_id: int
    field_value: str = Field(min_length=1)


class FieldOptionDelete(BaseModel):
    field_name: str
    field_id: int


class FieldOptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    label: str
    value: str


class HolidayCreate(BaseModel):
    name: str = Field(min_length=1)
    date: date
    description: Optional[str] = None
    is_recurring: bool = False


class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    description: Optional[str] = None
    is_recurring: Optional[bool] = None


class HolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    name: str
    date: date
    description: Optional[str] = None
    is_recurring: bool
    created_at: Optional[datetime] = None
