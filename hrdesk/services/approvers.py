"""
Per-category approver policies stored on the company, and the function that
turns a policy plus an employee into the approver that is actually required.
"""
import enum
from dataclasses import dataclass
from typing import Dict, Optional

from pydantic import BaseModel, model_validator
from sqlalchemy.orm import Session

from hrdesk.core.exceptions import InvalidInputError
from hrdesk.models.employee import EmployeeProfile


class ApproverKind(str, enum.Enum):
    MANAGER = "manager"
    ACCOUNT_OWNER = "account_owner"
    MANAGER_MANAGER = "manager_manager"
    SPECIFIC = "specific"
    FULL_ADMIN = "full_admin"


class PermissionCategory(str, enum.Enum):
    INFORMATION_UPDATES = "informationUpdates"
    TIME_OFF_REQUESTS = "timeOffRequests"
    EMPLOYMENT_STATUS = "employmentStatus"
    JOB_INFORMATION = "jobInformation"
    PROMOTION = "promotion"
    ASSET_REQUEST = "assetRequest"


class ApproverPolicy(BaseModel):
    approver: ApproverKind
    specific_person_id: Optional[int] = None

    @model_validator(mode="after")
    def check_specific_person(self):
        if self.approver == ApproverKind.SPECIFIC:
            if self.specific_person_id is None:
                raise ValueError("specific_person_id is required for the 'specific' approver")
        else:
            self.specific_person_id = None
        return self


def parse_category(name: str) -> PermissionCategory:
    try:
        return PermissionCategory(name)
    except ValueError:
        raise InvalidInputError("Invalid permission name", details={"allowed": [c.value for c in PermissionCategory]})


def default_permissions() -> Dict[str, dict]:
    return {c.value: ApproverPolicy(approver=ApproverKind.MANAGER).model_dump(mode="json") for c in PermissionCategory}


def load_policy(permissions: Optional[dict], category: PermissionCategory) -> ApproverPolicy:
    raw = (permissions or {}).get(category.value)
    if raw is None:
        return ApproverPolicy(approver=ApproverKind.MANAGER)
    return ApproverPolicy.model_validate(raw)


@dataclass(frozen=True)
class RequiredApprover:
    kind: ApproverKind
    # None with FULL_ADMIN means any owner may act
    employee_profile_id: Optional[int]


def resolve_required_approver(
    db: Session,
    policy: ApproverPolicy,
    employee: EmployeeProfile,
    owner_profile_id: Optional[int],
) -> RequiredApprover:
    """
    Manager-based policies fall back to the account owner when the chain
    has no one at that level.
    """
    if policy.approver == ApproverKind.MANAGER:
        manager_id = employee.reports_to_id
        if manager_id is None:
            return RequiredApprover(ApproverKind.ACCOUNT_OWNER, owner_profile_id)
        return RequiredApprover(ApproverKind.MANAGER, manager_id)

    if policy.approver == ApproverKind.MANAGER_MANAGER:
        manager_id = employee.reports_to_id
        manager = db.get(EmployeeProfile, manager_id) if manager_id else None
        skip_level_id = manager.reports_to_id if manager else None
        if skip_level_id is None:
            return RequiredApprover(ApproverKind.ACCOUNT_OWNER, owner_profile_id)
        return RequiredApprover(ApproverKind.MANAGER_MANAGER, skip_level_id)

    if policy.approver == ApproverKind.ACCOUNT_OWNER:
        return RequiredApprover(ApproverKind.ACCOUNT_OWNER, owner_profile_id)

    if policy.approver == ApproverKind.SPECIFIC:
        return RequiredApprover(ApproverKind.SPECIFIC, policy.specific_person_id)

    return RequiredApprover(ApproverKind.FULL_ADMIN, None)
