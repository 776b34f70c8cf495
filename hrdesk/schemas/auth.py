from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class RegisterCompanyRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    job_title: str
    phone: str
    company_name: str = Field(min_length=1)
    domain: str = Field(min_length=2, pattern=r"^[a-z0-9][a-z0-9\-\.]*$")
    employee_count: str
    country: str


class AccountRegisterRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    domain: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=8)


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company_id: int
    role_id: Optional[int] = None
    employee_profile_id: Optional[int] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: EmailStr
    phone: Optional[str] = None
    job_title: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    memberships: List[MembershipResponse] = []


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserResponse] = None
    company_id: Optional[int] = None


class OnboardingInviteRequest(BaseModel):
    email: EmailStr


class OnboardingAcceptRequest(BaseModel):
    token: str = Field(min_length=1)


class OnboardingExpiry(BaseModel):
    company_name: str
