# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    company, user, employee, employee_history,
    leave_type, leave_policy, leave_balance, time_off_request,
    time_log, holiday, employee_field, document, notification, audit_log
)

# Explicit class exports for cleaner imports
from .company import Company
from .user import User, Role, RoleName, Membership
from .employee import EmployeeProfile
from .employee_history import (
    JobInformation, EmploymentStatusEntry, CompensationEntry,
    EducationEntry, VisaInfoEntry, BonusEntry, AssetEntry,
)
from .leave_type import LeaveType
from .leave_policy import LeavePolicy
from .leave_balance import LeaveBalance
from .time_off_request import TimeOffRequest, TimeOffDay, TimeOffStatus
from .time_log import TimeLog
from .holiday import Holiday
from .employee_field import EmployeeFieldOption, FieldCategory
from .document import Folder, File
from .notification import Notification
from .audit_log import AuditLog

__all__ = [
    "Company", "User", "Role", "RoleName", "Membership", "EmployeeProfile",
    "JobInformation", "EmploymentStatusEntry", "CompensationEntry",
    "EducationEntry", "VisaInfoEntry", "BonusEntry", "AssetEntry",
    "LeaveType", "LeavePolicy", "LeaveBalance",
    "TimeOffRequest", "TimeOffDay", "TimeOffStatus", "TimeLog", "Holiday",
    "EmployeeFieldOption", "FieldCategory", "Folder", "File",
    "Notification", "AuditLog",
]
