"""
Account lifecycle: login, password reset and onboarding invites.

Email delivery is the only external step. When it fails, the token written
just before it is cleared again before the error is reported.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrdesk.core.config import settings
from hrdesk.core.exceptions import (
    DependencyFailureError,
    InvalidInputError,
    InvalidStateError,
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
)
from hrdesk.core.security import generate_token, hash_token
from hrdesk.models.company import Company
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.user import Membership, RoleName, User
from hrdesk.schemas.auth import AccountRegisterRequest, LoginRequest
from hrdesk.services.auth import get_password_hash, verify_password
from hrdesk.services.base import BaseService
from hrdesk.services.company_setup import get_role
from hrdesk.services.email import EmailDeliveryError, EmailSender
from hrdesk.services.employees import get_employee_by_number
from hrdesk.services.membership import ResolvedMembership, require_manager_or_owner


def _now() -> datetime:
    # Token expiries are stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AccountService(BaseService):
    def authenticate(self, data: LoginRequest) -> tuple:
        """Returns (user, company_id or None)."""
        company: Optional[Company] = None
        if data.domain:
            company = self.db.query(Company).filter(Company.domain == data.domain).first()
            if not company:
                raise InvalidInputError("Invalid domain")

        user = self.db.query(User).filter(User.email == data.email).first()
        if not user or not verify_password(data.password, user.hashed_password):
            self.log_warning("Failed login", email=data.email)
            raise NotAuthenticatedError("Invalid credentials")
        if not user.is_active:
            raise NotAuthorizedError("User is inactive")

        if company is not None and not any(m.company_id == company.id for m in user.memberships):
            raise NotAuthenticatedError("Invalid credentials")

        return user, company.id if company else None

    def register_account(self, data: AccountRegisterRequest) -> User:
        if self.db.query(User).filter(User.email == data.email).first():
            raise InvalidInputError("User already exists")
        user = User(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone,
            hashed_password=get_password_hash(data.password),
        )
        self.db.add(user)
        self.commit()
        self.db.refresh(user)
        return user

    def forgot_password(self, email: str, sender: EmailSender):
        user = self.db.query(User).filter(User.email == email).first()
        if not user:
            raise NotFoundError("There is no user with that email")

        raw, digest = generate_token()
        user.reset_password_token = digest
        user.reset_password_expires = _now() + timedelta(minutes=settings.reset_token_expire_minutes)
        self.commit()

        link = f"{settings.client_url}/reset-password/{raw}"
        body = (
            "You are receiving this email because you (or someone else) has requested "
            f"the reset of a password. Please open the following link:\n\n{link}\n\n"
            "If you did not request this, please ignore this email."
        )
        try:
            sender.send(user.email, "Password reset", body)
        except EmailDeliveryError:
            user.reset_password_token = None
            user.reset_password_expires = None
            self.commit()
            raise DependencyFailureError("Email could not be sent")

    def reset_password(self, raw_token: str, password: str) -> User:
        user = (
            self.db.query(User)
            .filter(User.reset_password_token == hash_token(raw_token), User.reset_password_expires > _now())
            .first()
        )
        if not user:
            raise InvalidInputError("Invalid token")

        user.hashed_password = get_password_hash(password)
        user.reset_password_token = None
        user.reset_password_expires = None
        self.commit()
        self.db.refresh(user)
        return user


class OnboardingService(BaseService):
    def send_invite(self, membership: ResolvedMembership, employee_number: int, email: str, sender: EmailSender):
        self.company_id = membership.company_id
        company = self.db.get(Company, membership.company_id)
        employee = get_employee_by_number(self.db, membership.company_id, employee_number)
        require_manager_or_owner(membership, employee)
        if employee.membership is not None:
            raise InvalidStateError("Employee has already been onboarded")

        raw, digest = generate_token()
        employee.onboarding_token = digest
        employee.onboarding_token_expires = _now() + timedelta(hours=settings.onboarding_token_expire_hours)
        self.commit()

        link = f"{settings.client_url}/onboard/{raw}"
        body = (
            f"You have been invited to join {company.name}.\n\n"
            f"Please open the following link to complete the onboarding process:\n\n{link}\n\n"
            "If you were not expecting this invite, please ignore this email."
        )
        try:
            sender.send(email, f"Onboarding Invite from {company.name}", body)
        except EmailDeliveryError:
            employee.onboarding_token = None
            employee.onboarding_token_expires = None
            self.commit()
            raise DependencyFailureError("Email could not be sent")

        self.log_info("Onboarding invite sent", company_id=company.id, employee_id=employee.id)

    def _profile_for_token(self, raw_token: str) -> EmployeeProfile:
        profile = (
            self.db.query(EmployeeProfile)
            .filter(
                EmployeeProfile.onboarding_token == hash_token(raw_token),
                EmployeeProfile.onboarding_token_expires > _now(),
            )
            .first()
        )
        if not profile:
            raise InvalidStateError("Invite token expired")
        return profile

    def check_expiry(self, raw_token: str) -> str:
        return self._profile_for_token(raw_token).company.name

    def accept_invite(self, user: User, raw_token: str) -> EmployeeProfile:
        profile = self._profile_for_token(raw_token)
        if any(m.company_id == profile.company_id for m in user.memberships):
            raise InvalidStateError("You are already part of this company")

        role_id = profile.role_id or get_role(self.db, RoleName.EMPLOYEE.value).id
        self.db.add(Membership(
            user_id=user.id,
            company_id=profile.company_id,
            role_id=role_id,
            employee_profile_id=profile.id,
        ))
        profile.onboarding_token = None
        profile.onboarding_token_expires = None
        profile.login_access = True
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidStateError("You are already part of this company")

        self.db.refresh(profile)
        self.log_info("Onboarding accepted", company_id=profile.company_id, user_id=user.id)
        return profile
