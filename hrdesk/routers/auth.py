import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from hrdesk.core.limiter import AUTH_RATE_LIMIT, limiter
from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.models.user import User
from hrdesk.routers.deps import get_current_user
from hrdesk.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterCompanyRequest,
    ResetPasswordRequest,
    Token,
    UserResponse,
)
from hrdesk.services import auth as auth_service
from hrdesk.services.accounts import AccountService
from hrdesk.services.company_setup import register_company
from hrdesk.services.email import EmailSender, get_email_sender

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def token_response(user: User, company_id=None) -> ApiResponse[Token]:
    return ApiResponse.ok(Token(
        access_token=auth_service.create_user_token(user),
        user=UserResponse.model_validate(user),
        company_id=company_id,
    ))


@router.post("/register", response_model=ApiResponse[Token], status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
def register(request: Request, data: RegisterCompanyRequest, db: Session = Depends(get_db)):
    """Register a company together with its owner account."""
    user, company, _ = register_company(db, data)
    return token_response(user, company.id)


@router.post("/login", response_model=ApiResponse[Token])
@limiter.limit(AUTH_RATE_LIMIT)
def login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    user, company_id = AccountService(db).authenticate(data)
    return token_response(user, company_id)


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(current_user: User = Depends(get_current_user)):
    return ApiResponse.ok(UserResponse.model_validate(current_user))


@router.post("/forgot-password", response_model=ApiResponse[dict])
@limiter.limit(AUTH_RATE_LIMIT)
def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    AccountService(db).forgot_password(data.email, sender)
    return ApiResponse.ok({"message": "Email sent"})


@router.put("/reset-password/{token}", response_model=ApiResponse[Token])
@limiter.limit(AUTH_RATE_LIMIT)
def reset_password(request: Request, token: str, data: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = AccountService(db).reset_password(token, data.password)
    return token_response(user)
