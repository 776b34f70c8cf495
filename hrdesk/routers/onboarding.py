from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from hrdesk.core.limiter import AUTH_RATE_LIMIT, limiter
from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.models.user import User
from hrdesk.routers.auth import token_response
from hrdesk.routers.deps import get_current_user, get_membership
from hrdesk.schemas.auth import (
    AccountRegisterRequest,
    LoginRequest,
    OnboardingAcceptRequest,
    OnboardingExpiry,
    OnboardingInviteRequest,
    Token,
)
from hrdesk.schemas.employee import EmployeeResponse
from hrdesk.services.accounts import AccountService, OnboardingService
from hrdesk.services.email import EmailSender, get_email_sender
from hrdesk.services.membership import ResolvedMembership

router = APIRouter(tags=["onboarding"])


@router.post(
    "/companies/{company_id}/employees/{employee_number}/onboarding-invite",
    response_model=ApiResponse[dict],
)
def send_onboarding_invite(
    employee_number: int,
    data: OnboardingInviteRequest,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    OnboardingService(db).send_invite(membership, employee_number, data.email, sender)
    return ApiResponse.ok({"message": "Onboarding email sent successfully."})


@router.get("/onboarding/{token}/expiry", response_model=ApiResponse[OnboardingExpiry])
def check_onboarding_expiry(token: str, db: Session = Depends(get_db)):
    return ApiResponse.ok(OnboardingExpiry(company_name=OnboardingService(db).check_expiry(token)))


@router.post("/onboarding/register", response_model=ApiResponse[Token], status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
def onboarding_register(request: Request, data: AccountRegisterRequest, db: Session = Depends(get_db)):
    """Create an account that does not belong to any company yet."""
    user = AccountService(db).register_account(data)
    return token_response(user)


@router.post("/onboarding/login", response_model=ApiResponse[Token])
@limiter.limit(AUTH_RATE_LIMIT)
def onboarding_login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    user, _ = AccountService(db).authenticate(LoginRequest(email=data.email, password=data.password))
    return token_response(user)


@router.post("/onboarding/accept", response_model=ApiResponse[EmployeeResponse])
def accept_onboarding_invite(
    data: OnboardingAcceptRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = OnboardingService(db).accept_invite(current_user, data.token)
    return ApiResponse.ok(EmployeeResponse.model_validate(profile))
