"""
Company settings: picklists, company info and ownership, approver
permissions, holidays, leave types and leave policies.
"""
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from hrdesk.core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from hrdesk.models.company import Company
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.employee_field import EmployeeFieldOption, FieldCategory
from hrdesk.models.holiday import Holiday
from hrdesk.models.leave_policy import LeavePolicy
from hrdesk.models.leave_type import LeaveType
from hrdesk.models.user import Membership, RoleName
from hrdesk.schemas.company import HolidayCreate, HolidayUpdate, PermissionUpdate
from hrdesk.schemas.leave import LeavePolicyCreate, LeaveTypeCreate
from hrdesk.services.approvers import (
    ApproverPolicy,
    PermissionCategory,
    RequiredApprover,
    load_policy,
    parse_category,
    resolve_required_approver,
)
from hrdesk.services.audit import AuditService
from hrdesk.services.base import BaseService
from hrdesk.services.company_setup import get_role
from hrdesk.services.employees import get_employee
from hrdesk.services.membership import ResolvedMembership, find_owner_profile_id, require_owner


def parse_field_category(name: str) -> FieldCategory:
    try:
        return FieldCategory(name)
    except ValueError:
        raise InvalidInputError("Invalid field name", details={"allowed": [c.value for c in FieldCategory]})


class CompanySettingsService(BaseService):
    def __init__(self, db: Session, membership: ResolvedMembership):
        super().__init__(db, membership.company_id)
        self.membership = membership

    @property
    def company(self) -> Company:
        company = self.db.get(Company, self.company_id)
        if not company:
            raise NotFoundError("Company not found")
        return company

    # --- employee field options ---

    def field_options(self) -> Dict[str, List[EmployeeFieldOption]]:
        options = (
            self.db.query(EmployeeFieldOption)
            .filter(EmployeeFieldOption.company_id == self.company_id)
            .order_by(EmployeeFieldOption.id)
            .all()
        )
        grouped: Dict[str, List[EmployeeFieldOption]] = {c.value: [] for c in FieldCategory}
        for option in options:
            grouped.setdefault(option.category, []).append(option)
        return grouped

    def _field_option(self, category: FieldCategory, option_id: int) -> EmployeeFieldOption:
        option = (
            self.db.query(EmployeeFieldOption)
            .filter(
                EmployeeFieldOption.id == option_id,
                EmployeeFieldOption.company_id == self.company_id,
                EmployeeFieldOption.category == category.value,
            )
            .first()
        )
        if not option:
            raise NotFoundError("Field not found")
        return option

    def add_field_option(self, field_name: str, value: str) -> EmployeeFieldOption:
        require_owner(self.membership)
        category = parse_field_category(field_name)
        option = EmployeeFieldOption(company_id=self.company_id, category=category.value, label=value, value=value)
        self.db.add(option)
        self.commit()
        self.db.refresh(option)
        return option

    def rename_field_option(self, field_name: str, option_id: int, value: str) -> EmployeeFieldOption:
        require_owner(self.membership)
        option = self._field_option(parse_field_category(field_name), option_id)
        option.label = value
        option.value = value
        self.commit()
        self.db.refresh(option)
        return option

    def remove_field_option(self, field_name: str, option_id: int):
        require_owner(self.membership)
        option = self._field_option(parse_field_category(field_name), option_id)
        self.db.delete(option)
        self.commit()

    # --- company info and ownership ---

    def company_info(self) -> dict:
        employees = (
            self.db.query(EmployeeProfile)
            .filter(EmployeeProfile.company_id == self.company_id)
            .order_by(EmployeeProfile.employee_number)
            .all()
        )
        return {
            "company": self.company,
            "employees": employees,
            "owner_profile_id": find_owner_profile_id(self.db, self.company_id),
        }

    def update_company(
        self,
        name: Optional[str] = None,
        employee_count: Optional[str] = None,
        country: Optional[str] = None,
        owner_profile_id: Optional[int] = None,
        store_logo: Optional[Callable[[], str]] = None,
    ) -> dict:
        """`store_logo` runs only after every check has passed, so a rejected update stores nothing."""
        require_owner(self.membership)
        if owner_profile_id is not None and owner_profile_id != self.membership.employee_profile_id:
            self._transfer_ownership(owner_profile_id)

        company = self.company
        for field, value in (("name", name), ("employee_count", employee_count), ("country", country)):
            if value is not None:
                setattr(company, field, value)
        if store_logo is not None:
            company.logo_url = store_logo()

        self.commit()
        self.db.refresh(company)
        return {"company": company, "owner_profile_id": find_owner_profile_id(self.db, self.company_id)}

    def _transfer_ownership(self, new_owner_profile_id: int):
        """
        Rewrite both memberships in the current transaction: the old owner
        becomes an employee, the new one the owner.
        """
        get_employee(self.db, self.company_id, new_owner_profile_id)
        memberships = (
            self.db.query(Membership)
            .filter(
                Membership.company_id == self.company_id,
                Membership.employee_profile_id.in_([self.membership.employee_profile_id, new_owner_profile_id]),
            )
            .with_for_update()
            .all()
        )
        by_profile = {m.employee_profile_id: m for m in memberships}
        new_owner = by_profile.get(new_owner_profile_id)
        if new_owner is None:
            raise InvalidStateError("Employee has not completed onboarding")
        previous_owner = by_profile[self.membership.employee_profile_id]

        previous_owner.role_id = get_role(self.db, RoleName.EMPLOYEE.value).id
        new_owner.role_id = get_role(self.db, RoleName.OWNER.value).id

        AuditService.log(
            self.db, self.company_id,
            action="owner_transferred",
            entity_type="company",
            entity_id=self.company_id,
            user_id=self.membership.user_id,
            before_state={"owner_profile_id": self.membership.employee_profile_id},
            after_state={"owner_profile_id": new_owner_profile_id},
        )
        self.log_info("Ownership transferred", company_id=self.company_id, new_owner_profile_id=new_owner_profile_id)

    # --- permissions ---

    def permissions(self) -> Dict[str, ApproverPolicy]:
        stored = self.company.permissions
        return {c.value: load_policy(stored, c) for c in PermissionCategory}

    def update_permission(self, data: PermissionUpdate) -> Dict[str, ApproverPolicy]:
        require_owner(self.membership)
        category = parse_category(data.permission_name)
        try:
            policy = ApproverPolicy(approver=data.approver, specific_person_id=data.specific_person_id)
        except ValidationError as e:
            raise InvalidInputError("Invalid approver", details={"errors": e.errors(include_url=False, include_context=False)})
        if policy.specific_person_id is not None:
            get_employee(self.db, self.company_id, policy.specific_person_id)

        company = self.company
        before = (company.permissions or {}).get(category.value)
        permissions = dict(company.permissions or {})
        permissions[category.value] = policy.model_dump(mode="json")
        company.permissions = permissions

        AuditService.log(
            self.db, self.company_id,
            action="permission_updated",
            entity_type="company",
            entity_id=self.company_id,
            user_id=self.membership.user_id,
            details={"permission_name": category.value},
            before_state=before,
            after_state=permissions[category.value],
        )
        self.commit()
        return self.permissions()

    def required_approver(self, category_name: str, employee_id: int) -> RequiredApprover:
        category = parse_category(category_name)
        employee = get_employee(self.db, self.company_id, employee_id)
        policy = load_policy(self.company.permissions, category)
        return resolve_required_approver(self.db, policy, employee, find_owner_profile_id(self.db, self.company_id))

    # --- holidays ---

    def _holiday(self, holiday_id: int) -> Holiday:
        holiday = (
            self.db.query(Holiday)
            .filter(Holiday.id == holiday_id, Holiday.company_id == self.company_id)
            .first()
        )
        if not holiday:
            raise NotFoundError("Holiday not found")
        return holiday

    def add_holiday(self, data: HolidayCreate) -> Holiday:
        holiday = Holiday(company_id=self.company_id, **data.model_dump())
        self.db.add(holiday)
        self.commit()
        self.db.refresh(holiday)
        return holiday

    def holidays(self) -> List[Holiday]:
        return (
            self.db.query(Holiday)
            .filter(Holiday.company_id == self.company_id)
            .order_by(Holiday.date)
            .all()
        )

    def update_holiday(self, holiday_id: int, data: HolidayUpdate) -> Holiday:
        require_owner(self.membership)
        holiday = self._holiday(holiday_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None or field == "description":
                setattr(holiday, field, value)
        self.commit()
        self.db.refresh(holiday)
        return holiday

    def delete_holiday(self, holiday_id: int):
        require_owner(self.membership)
        self.db.delete(self._holiday(holiday_id))
        self.commit()

    # --- leave types and policies ---

    def leave_types(self) -> List[LeaveType]:
        return self.db.query(LeaveType).filter(LeaveType.company_id == self.company_id).order_by(LeaveType.id).all()

    def create_leave_type(self, data: LeaveTypeCreate) -> LeaveType:
        require_owner(self.membership)
        leave_type = LeaveType(company_id=self.company_id, name=data.name, default_hours=data.default_hours)
        self.db.add(leave_type)
        self.commit()
        self.db.refresh(leave_type)
        return leave_type

    def leave_policies(self) -> List[LeavePolicy]:
        return self.db.query(LeavePolicy).filter(LeavePolicy.company_id == self.company_id).order_by(LeavePolicy.id).all()

    def create_leave_policy(self, data: LeavePolicyCreate) -> LeavePolicy:
        require_owner(self.membership)
        ids = set(data.leave_type_ids)
        leave_types = (
            self.db.query(LeaveType)
            .filter(LeaveType.company_id == self.company_id, LeaveType.id.in_(ids))
            .all()
        ) if ids else []
        if len(leave_types) != len(ids):
            raise NotFoundError("Leave type not found")

        policy = LeavePolicy(company_id=self.company_id, name=data.name, leave_types=leave_types)
        self.db.add(policy)
        self.commit()
        self.db.refresh(policy)
        return policy
