from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import date
from typing import List, Optional

from hrdesk.schemas.history import (
    JobInformationOut, EmploymentStatusOut, CompensationOut,
    EducationOut, VisaInfoOut, BonusOut, AssetOut,
)


class PersonalInfo(BaseModel):
    first_name: str = Field(min_length=1)
    middle_name: Optional[str] = None
    last_name: str = Field(min_length=1)
    dob: Optional[date] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    ssn: Optional[str] = None
    ethnicity: Optional[str] = None
    street1: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    work_phone: Optional[str] = None
    mobile_phone: Optional[str] = None
    work_email: Optional[EmailStr] = None
    home_email: Optional[EmailStr] = None


class EmployeeCreate(PersonalInfo):
    hiring_date: Optional[date] = None
    leave_policy_id: Optional[int] = None
    role: str = "employee"
    login_access: bool = False


class PersonalInfoUpdate(PersonalInfo):
    login_access: Optional[bool] = None


class LeaveBalanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    leave_type_id: int
    remaining_hours: float


class EmployeeName(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_number: int
    first_name: str
    middle_name: Optional[str] = None
    last_name: str


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    employee_number: int
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    dob: Optional[date] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    ethnicity: Optional[str] = None
    street1: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    work_phone: Optional[str] = None
    mobile_phone: Optional[str] = None
    work_email: Optional[str] = None
    home_email: Optional[str] = None
    hiring_date: Optional[date] = None
    image_url: Optional[str] = None
    login_access: bool
    leave_policy_id: Optional[int] = None
    reports_to_id: Optional[int] = None


class EmployeeDetail(EmployeeResponse):
    ssn_last4: Optional[str] = None
    leave_balances: List[LeaveBalanceOut] = []
    job_information: List[JobInformationOut] = []
    employment_status_history: List[EmploymentStatusOut] = []
    compensation_history: List[CompensationOut] = []
    education: List[EducationOut] = []
    visa_info: List[VisaInfoOut] = []
    bonuses: List[BonusOut] = []
    assets: List[AssetOut] = []


class OrgChartNode(BaseModel):
    id: int
    employee_number: int
    name: str
    job_title: Optional[str] = None
    department: Optional[str] = None
    image_url: Optional[str] = None
    reports: List["OrgChartNode"] = []


OrgChartNode.model_rebuild()
