"""
Membership resolution: caller account + company -> role and employee profile.

Every mutating time-clock and leave operation resolves the caller here and
runs one of the guards below before it reads or writes any tenant record.
"""
from dataclasses import dataclass
from typing import Iterable, MutableMapping, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from hrdesk.core.exceptions import InvalidInputError, NotAuthorizedError
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.user import Membership, Role, RoleName


@dataclass(frozen=True)
class ResolvedMembership:
    user_id: int
    company_id: int
    role_id: int
    role_name: str
    employee_profile_id: int

    @property
    def is_owner(self) -> bool:
        return is_owner(self.role_name)


def find_membership(memberships: Iterable[Membership], company_id: int) -> Optional[ResolvedMembership]:
    """
    Scan an account's triples for `company_id`. A triple missing its role or
    profile does not count as membership.
    """
    for m in memberships:
        if m.company_id != company_id:
            continue
        if m.role is None or m.employee_profile_id is None:
            return None
        return ResolvedMembership(
            user_id=m.user_id,
            company_id=m.company_id,
            role_id=m.role_id,
            role_name=m.role.name,
            employee_profile_id=m.employee_profile_id,
        )
    return None


def is_owner(role_name: Optional[str]) -> bool:
    return role_name == RoleName.OWNER.value


def is_manager(caller_profile_id: int, employee: EmployeeProfile) -> bool:
    """
    True when the employee's current job entry reports to the caller, or when
    the employee has no job information yet (nobody assigned as manager).
    """
    job = employee.current_job
    if job is None:
        return True
    return job.reports_to_id == caller_profile_id


def _check_identifier(value, name: str):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"Malformed {name}")


class MembershipResolver:
    """
    Resolves membership with a fresh scan per call. Pass a mapping as `cache`
    to memoize by (caller, company) for the lifetime of that mapping.
    """

    def __init__(self, db: Session, cache: Optional[MutableMapping[Tuple[int, int], ResolvedMembership]] = None):
        self.db = db
        self.cache = cache

    def resolve(self, caller_user_id: int, company_id: int) -> ResolvedMembership:
        _check_identifier(caller_user_id, "user id")
        _check_identifier(company_id, "company id")

        key = (caller_user_id, company_id)
        if self.cache is not None and key in self.cache:
            return self.cache[key]

        memberships = (
            self.db.query(Membership)
            .options(joinedload(Membership.role))
            .filter(Membership.user_id == caller_user_id)
            .all()
        )
        resolved = find_membership(memberships, company_id)
        if resolved is None:
            raise NotAuthorizedError("User is not part of this company")

        if self.cache is not None:
            self.cache[key] = resolved
        return resolved


# --- Guards ---

def require_self(membership: ResolvedMembership, employee: EmployeeProfile):
    if membership.employee_profile_id != employee.id:
        raise NotAuthorizedError("You are not authorized")


def require_owner(membership: ResolvedMembership):
    if not membership.is_owner:
        raise NotAuthorizedError("Only the company owner can perform this action")


def require_manager_or_owner(membership: ResolvedMembership, employee: EmployeeProfile):
    if membership.is_owner or is_manager(membership.employee_profile_id, employee):
        return
    raise NotAuthorizedError("Only the employee's manager or the company owner can perform this action")


def require_self_manager_or_owner(membership: ResolvedMembership, employee: EmployeeProfile):
    if membership.employee_profile_id == employee.id:
        return
    require_manager_or_owner(membership, employee)


def find_owner_profile_id(db: Session, company_id: int) -> Optional[int]:
    return (
        db.query(Membership.employee_profile_id)
        .join(Role, Membership.role_id == Role.id)
        .filter(Membership.company_id == company_id, Role.name == RoleName.OWNER.value)
        .scalar()
    )
