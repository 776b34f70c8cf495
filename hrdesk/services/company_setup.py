"""
Company registration and the seed data every new tenant starts with.
"""
import logging
from typing import Tuple

from sqlalchemy.orm import Session

from hrdesk.core.config import settings
from hrdesk.core.constants import DEFAULT_FIELD_OPTIONS, PROTECTED_ROLES
from hrdesk.core.exceptions import InvalidInputError, InvalidStateError
from hrdesk.models.company import Company
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.employee_field import EmployeeFieldOption
from hrdesk.models.leave_policy import LeavePolicy
from hrdesk.models.leave_type import LeaveType
from hrdesk.models.user import Membership, Role, RoleName, User
from hrdesk.schemas.auth import RegisterCompanyRequest
from hrdesk.services.approvers import default_permissions
from hrdesk.services.auth import get_password_hash
from hrdesk.services.employees import create_profile

logger = logging.getLogger(__name__)


def seed_roles(db: Session):
    """Create the built-in roles if missing. Safe to call on every startup."""
    existing = {name for (name,) in db.query(Role.name).all()}
    created = [Role(name=name, permissions=[]) for name in PROTECTED_ROLES if name not in existing]
    if created:
        db.add_all(created)
        db.commit()
        logger.info(f"Seeded roles: {', '.join(r.name for r in created)}")


def get_role(db: Session, name: str) -> Role:
    role = db.query(Role).filter(Role.name == name).first()
    if not role:
        raise InvalidStateError(f"Role '{name}' is not configured")
    return role


def seed_company_defaults(db: Session, company: Company) -> LeavePolicy:
    for category, values in DEFAULT_FIELD_OPTIONS.items():
        for value in values:
            db.add(EmployeeFieldOption(company_id=company.id, category=category, label=value, value=value))

    leave_types = [
        LeaveType(company_id=company.id, name=lt["name"], default_hours=lt["default_hours"])
        for lt in settings.default_leave_types
    ]
    db.add_all(leave_types)

    policy = LeavePolicy(company_id=company.id, name=settings.default_leave_policy_name, leave_types=leave_types)
    db.add(policy)
    db.flush()
    return policy


def register_company(db: Session, data: RegisterCompanyRequest) -> Tuple[User, Company, EmployeeProfile]:
    """
    Create the company, its owner account, the owner's employee profile (#1)
    and the owner membership in one transaction.
    """
    if db.query(Company).filter(Company.domain == data.domain).first():
        raise InvalidInputError("Company already exists with this domain")
    if db.query(User).filter(User.email == data.email).first():
        raise InvalidInputError("User already exists")

    owner_role = get_role(db, RoleName.OWNER.value)

    company = Company(
        name=data.company_name,
        domain=data.domain,
        employee_count=data.employee_count,
        country=data.country,
        permissions=default_permissions(),
        employee_sequence=0,
    )
    db.add(company)
    db.flush()

    policy = seed_company_defaults(db, company)

    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        job_title=data.job_title,
        phone=data.phone,
    )
    db.add(user)
    db.flush()

    profile = create_profile(
        db,
        company,
        policy,
        first_name=data.first_name,
        last_name=data.last_name,
        work_email=data.email,
        work_phone=data.phone,
        role_id=owner_role.id,
        login_access=True,
    )
    db.add(Membership(user_id=user.id, company_id=company.id, role_id=owner_role.id, employee_profile_id=profile.id))

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info("Company registered", extra={"company_id": company.id, "domain": company.domain})
    return user, company, profile
