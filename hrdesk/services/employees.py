"""
Employee profile service: hiring, lookup, personal info and the org chart.
"""
from typing import Callable, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from hrdesk.core.exceptions import InvalidInputError, NotFoundError
from hrdesk.core.security import decrypt_data, encrypt_data
from hrdesk.models.company import Company
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.leave_balance import LeaveBalance
from hrdesk.models.leave_policy import LeavePolicy
from hrdesk.models.user import Membership, Role
from hrdesk.schemas.employee import EmployeeCreate, EmployeeDetail, OrgChartNode, PersonalInfoUpdate
from hrdesk.services.base import BaseService
from hrdesk.services.membership import (
    ResolvedMembership,
    require_owner,
    require_self_manager_or_owner,
)

HISTORY_ATTRIBUTES = (
    "job_information", "employment_status_history", "compensation_history",
    "education", "visa_info", "bonuses", "assets",
)


def get_employee(db: Session, company_id: int, employee_id: int) -> EmployeeProfile:
    employee = (
        db.query(EmployeeProfile)
        .filter(EmployeeProfile.id == employee_id, EmployeeProfile.company_id == company_id)
        .first()
    )
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def get_employee_by_number(db: Session, company_id: int, employee_number: int) -> EmployeeProfile:
    employee = (
        db.query(EmployeeProfile)
        .filter(EmployeeProfile.company_id == company_id, EmployeeProfile.employee_number == employee_number)
        .first()
    )
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def next_employee_number(db: Session, company_id: int) -> int:
    """Bump the company's counter in the store; the row lock serializes concurrent hires."""
    db.execute(
        update(Company)
        .where(Company.id == company_id)
        .values(employee_sequence=Company.employee_sequence + 1)
        .execution_options(synchronize_session=False)
    )
    return db.query(Company.employee_sequence).filter(Company.id == company_id).scalar()


def create_profile(db: Session, company: Company, policy: Optional[LeavePolicy], **fields) -> EmployeeProfile:
    """
    Flush a new profile with the next employee number and one balance per
    leave type in `policy`, each starting at the type's default hours.
    """
    profile = EmployeeProfile(
        company_id=company.id,
        employee_number=next_employee_number(db, company.id),
        leave_policy_id=policy.id if policy else None,
        **fields,
    )
    if policy:
        profile.leave_balances = [
            LeaveBalance(leave_type_id=lt.id, remaining_hours=lt.default_hours)
            for lt in policy.leave_types
        ]
    db.add(profile)
    db.flush()
    return profile


def employee_detail(employee: EmployeeProfile) -> EmployeeDetail:
    detail = EmployeeDetail.model_validate(employee)
    ssn = decrypt_data(employee.ssn_encrypted)
    detail.ssn_last4 = ssn[-4:] if ssn else None
    for attr in HISTORY_ATTRIBUTES:
        entries = getattr(detail, attr)
        entries.sort(key=lambda e: (e.effective_date, e.id), reverse=True)
    return detail


class EmployeeService(BaseService):
    def __init__(self, db: Session, membership: ResolvedMembership):
        super().__init__(db, membership.company_id)
        self.membership = membership

    def _resolve_policy(self, leave_policy_id: Optional[int]) -> Optional[LeavePolicy]:
        query = self.db.query(LeavePolicy).filter(LeavePolicy.company_id == self.company_id)
        if leave_policy_id is not None:
            policy = query.filter(LeavePolicy.id == leave_policy_id).first()
            if not policy:
                raise NotFoundError("Leave policy not found")
            return policy
        return query.order_by(LeavePolicy.id).first()

    def create(self, data: EmployeeCreate) -> EmployeeProfile:
        require_owner(self.membership)

        role = self.db.query(Role).filter(Role.name == data.role).first()
        if not role:
            raise InvalidInputError(f"Unknown role '{data.role}'")

        company = self.db.get(Company, self.company_id)
        policy = self._resolve_policy(data.leave_policy_id)

        fields = data.model_dump(exclude={"ssn", "role", "leave_policy_id"})
        employee = create_profile(
            self.db, company, policy,
            ssn_encrypted=encrypt_data(data.ssn),
            role_id=role.id,
            **fields,
        )
        self.commit()
        self.db.refresh(employee)
        self.log_info("Employee created", company_id=self.company_id, employee_id=employee.id)
        return employee

    def list_names(self) -> List[EmployeeProfile]:
        return (
            self.db.query(EmployeeProfile)
            .filter(EmployeeProfile.company_id == self.company_id)
            .order_by(EmployeeProfile.employee_number)
            .all()
        )

    def list_profiles(self) -> List[EmployeeDetail]:
        employees = (
            self.db.query(EmployeeProfile)
            .options(*(selectinload(getattr(EmployeeProfile, a)) for a in HISTORY_ATTRIBUTES))
            .filter(EmployeeProfile.company_id == self.company_id)
            .order_by(EmployeeProfile.employee_number)
            .all()
        )
        return [employee_detail(e) for e in employees]

    def get(self, employee_id: int) -> EmployeeDetail:
        return employee_detail(get_employee(self.db, self.company_id, employee_id))

    def delete(self, employee_id: int):
        require_owner(self.membership)
        employee = get_employee(self.db, self.company_id, employee_id)
        if employee.id == self.membership.employee_profile_id:
            raise InvalidInputError("You cannot delete your own profile")

        for membership in self.db.query(Membership).filter(Membership.employee_profile_id == employee.id):
            self.db.delete(membership)
        # Time logs, requests and documents go with the profile through ON DELETE rules
        self.db.delete(employee)
        self.commit()
        self.log_info("Employee deleted", company_id=self.company_id, employee_id=employee_id)

    def update_personal_info(self, employee_id: int, data: PersonalInfoUpdate) -> EmployeeProfile:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self_manager_or_owner(self.membership, employee)

        changes = data.model_dump(exclude_unset=True)
        if "login_access" in changes:
            if changes["login_access"] is None:
                changes.pop("login_access")
            elif employee.id == self.membership.employee_profile_id and not self.membership.is_owner:
                raise InvalidInputError("You cannot change your own login access")
        if "ssn" in changes:
            employee.ssn_encrypted = encrypt_data(changes.pop("ssn"))
        for field, value in changes.items():
            setattr(employee, field, value)

        self.commit()
        self.db.refresh(employee)
        return employee

    def set_profile_picture(self, employee_id: int, store: Callable[[], str]) -> EmployeeProfile:
        """`store` uploads the image and returns its URL; it runs only once the caller is authorized."""
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self_manager_or_owner(self.membership, employee)
        employee.image_url = store()
        self.commit()
        self.db.refresh(employee)
        return employee

    def org_chart(self) -> List[OrgChartNode]:
        """Forest of reporting lines; anyone without a manager in this company is a root."""
        employees = (
            self.db.query(EmployeeProfile)
            .options(selectinload(EmployeeProfile.job_information))
            .filter(EmployeeProfile.company_id == self.company_id)
            .order_by(EmployeeProfile.employee_number)
            .all()
        )
        by_id = {e.id: e for e in employees}
        children: Dict[Optional[int], List[EmployeeProfile]] = {}
        for e in employees:
            manager_id = e.reports_to_id
            if manager_id not in by_id or manager_id == e.id:
                manager_id = None
            children.setdefault(manager_id, []).append(e)

        placed = set()

        def build(employee: EmployeeProfile) -> OrgChartNode:
            placed.add(employee.id)
            job = employee.current_job
            return OrgChartNode(
                id=employee.id,
                employee_number=employee.employee_number,
                name=employee.full_name,
                job_title=job.job_title if job else None,
                department=job.department if job else None,
                image_url=employee.image_url,
                reports=[build(c) for c in children.get(employee.id, []) if c.id not in placed],
            )

        roots = [build(e) for e in children.get(None, [])]
        # Reporting cycles have no root; surface them at the top level
        roots.extend(build(e) for e in employees if e.id not in placed)
        return roots
