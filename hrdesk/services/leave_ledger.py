"""
Leave ledger: time-off requests and per-employee leave balances.

Balances only move through two paths, approval of a Pending request and a
manual adjustment, and both apply the arithmetic inside the UPDATE statement
so concurrent writers cannot lose each other's change.
"""
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from hrdesk.core.config import settings
from hrdesk.core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.leave_balance import LeaveBalance
from hrdesk.models.leave_policy import LeavePolicy
from hrdesk.models.leave_type import LeaveType
from hrdesk.models.time_off_request import TimeOffDay, TimeOffRequest, TimeOffStatus
from hrdesk.schemas.leave import (
    LeaveDetail,
    PublicHolidayResult,
    TimeOffRequestCreate,
    TimeOffRequestResponse,
    TimeOffRequestsPartition,
)
from hrdesk.services.audit import AuditService
from hrdesk.services.base import BaseService
from hrdesk.services.employees import get_employee
from hrdesk.services.membership import (
    ResolvedMembership,
    require_manager_or_owner,
    require_owner,
    require_self,
)

DECISIONS = (TimeOffStatus.APPROVED.value, TimeOffStatus.DENIED.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveLedger(BaseService):
    def __init__(
        self,
        db: Session,
        membership: ResolvedMembership,
        clock: Callable[[], datetime] = _utcnow,
        today: Callable[[], date] = date.today,
    ):
        super().__init__(db, membership.company_id)
        self.membership = membership
        self.clock = clock
        self.today = today

    # --- lookups ---

    def _leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = (
            self.db.query(LeaveType)
            .filter(LeaveType.id == leave_type_id, LeaveType.company_id == self.company_id)
            .first()
        )
        if not leave_type:
            raise NotFoundError("Leave type not found")
        return leave_type

    def _request_in_company(self, request_id: int) -> TimeOffRequest:
        request = (
            self.db.query(TimeOffRequest)
            .join(EmployeeProfile, TimeOffRequest.employee_profile_id == EmployeeProfile.id)
            .filter(TimeOffRequest.id == request_id, EmployeeProfile.company_id == self.company_id)
            .first()
        )
        if not request:
            raise NotFoundError("Time off request not found")
        return request

    def _balances(self, employee_id: int) -> List[LeaveBalance]:
        return (
            self.db.query(LeaveBalance)
            .filter(LeaveBalance.employee_profile_id == employee_id)
            .order_by(LeaveBalance.leave_type_id)
            .all()
        )

    def _add_to_balance(self, employee_id: int, leave_type_id: int, hours: float) -> int:
        result = self.db.execute(
            update(LeaveBalance)
            .where(
                LeaveBalance.employee_profile_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
            )
            .values(remaining_hours=LeaveBalance.remaining_hours + hours)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # --- operations ---

    def request_time_off(self, employee_id: int, data: TimeOffRequestCreate) -> TimeOffRequestResponse:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self(self.membership, employee)
        self._leave_type(data.leave_type_id)

        request = TimeOffRequest(
            employee_profile_id=employee.id,
            leave_type_id=data.leave_type_id,
            start_date=data.start_date,
            end_date=data.end_date or data.start_date,
            note=data.note,
            status=TimeOffStatus.PENDING.value,
            days=[TimeOffDay(date=d.date, hours=d.hours) for d in data.day_hours],
        )
        self.db.add(request)
        self.commit()
        self.db.refresh(request)
        self.log_info("Time off requested", employee_id=employee.id, time_off_request_id=request.id)
        return TimeOffRequestResponse.from_model(request)

    def approve_deny_time_off(self, request_id: int, status: str) -> TimeOffRequestResponse:
        if status not in DECISIONS:
            raise InvalidInputError("Invalid status", details={"allowed": list(DECISIONS)})

        request = self._request_in_company(request_id)
        require_manager_or_owner(self.membership, request.employee)

        before = {"status": request.status}
        result = self.db.execute(
            update(TimeOffRequest)
            .where(
                TimeOffRequest.id == request.id,
                TimeOffRequest.status == TimeOffStatus.PENDING.value,
            )
            .values(
                status=status,
                approved_at=self.clock(),
                approved_by_id=self.membership.employee_profile_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStateError("Time off request has already been processed")

        total_hours = request.total_hours
        if status == TimeOffStatus.APPROVED.value and request.leave_type_id is not None:
            if not self._add_to_balance(request.employee_profile_id, request.leave_type_id, -total_hours):
                self.log_warning(
                    "No leave balance to deduct from",
                    employee_id=request.employee_profile_id,
                    leave_type_id=request.leave_type_id,
                )

        AuditService.log(
            self.db, self.company_id,
            action=f"time_off_{status.lower()}",
            entity_type="time_off_request",
            entity_id=request.id,
            user_id=self.membership.user_id,
            details={"total_hours": total_hours, "leave_type_id": request.leave_type_id},
            before_state=before,
            after_state={"status": status},
        )
        self.commit()
        self.db.refresh(request)
        self.log_info("Time off decided", time_off_request_id=request.id, status=status)
        return TimeOffRequestResponse.from_model(request)

    def update_leave_balance(self, employee_id: int, leave_type_id: int, hours: float) -> List[LeaveBalance]:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_manager_or_owner(self.membership, employee)
        self._leave_type(leave_type_id)

        before = next(
            (b.remaining_hours for b in self._balances(employee.id) if b.leave_type_id == leave_type_id), None
        )

        if not self._add_to_balance(employee.id, leave_type_id, hours):
            try:
                with self.db.begin_nested():
                    self.db.add(LeaveBalance(
                        employee_profile_id=employee.id,
                        leave_type_id=leave_type_id,
                        remaining_hours=hours,
                    ))
            except IntegrityError:
                # A concurrent adjustment created the row first
                self._add_to_balance(employee.id, leave_type_id, hours)

        AuditService.log(
            self.db, self.company_id,
            action="leave_balance_adjusted",
            entity_type="employee_profile",
            entity_id=employee.id,
            user_id=self.membership.user_id,
            details={"leave_type_id": leave_type_id, "hours": hours},
            before_state={"remaining_hours": before},
        )
        self.commit()
        self.db.expire_all()
        return self._balances(employee.id)

    def _persist_holiday_entry(self, employee: EmployeeProfile, holiday_date: date, name: str, approved_at: datetime):
        request = TimeOffRequest(
            employee_profile_id=employee.id,
            leave_type_id=None,
            start_date=holiday_date,
            end_date=holiday_date,
            note=name,
            status=TimeOffStatus.APPROVED.value,
            approved_at=approved_at,
            approved_by_id=self.membership.employee_profile_id,
            days=[TimeOffDay(date=holiday_date, hours=settings.public_holiday_hours)],
        )
        self.db.add(request)
        self.db.commit()

    def add_public_holiday(self, holiday_date: date, name: str) -> PublicHolidayResult:
        """
        One pre-approved request per employee, each committed on its own.
        A failed write is logged and reported; earlier and later ones stand.
        """
        require_owner(self.membership)

        employees = (
            self.db.query(EmployeeProfile)
            .filter(EmployeeProfile.company_id == self.company_id)
            .order_by(EmployeeProfile.id)
            .all()
        )
        approved_at = self.clock()

        created = 0
        failed: List[int] = []
        for employee in employees:
            employee_id = employee.id
            try:
                self._persist_holiday_entry(employee, holiday_date, name, approved_at)
                created += 1
            except SQLAlchemyError as e:
                self.db.rollback()
                failed.append(employee_id)
                self._logger.error(
                    f"Public holiday entry failed for employee {employee_id}: {e}",
                    extra={"company_id": self.company_id, "employee_id": employee_id},
                )

        self.log_info("Public holiday added", company_id=self.company_id, created_count=created, failed_count=len(failed))
        return PublicHolidayResult(created=created, failed_employee_ids=failed)

    def get_time_off_details(self, employee_id: int) -> List[LeaveDetail]:
        employee = get_employee(self.db, self.company_id, employee_id)
        if employee.leave_policy_id is None:
            return []

        policy = (
            self.db.query(LeavePolicy)
            .options(selectinload(LeavePolicy.leave_types))
            .filter(LeavePolicy.id == employee.leave_policy_id)
            .first()
        )
        if not policy:
            return []

        remaining = {b.leave_type_id: b.remaining_hours for b in self._balances(employee.id)}
        upcoming = (
            self.db.query(TimeOffRequest)
            .options(selectinload(TimeOffRequest.days))
            .filter(
                TimeOffRequest.employee_profile_id == employee.id,
                TimeOffRequest.start_date >= self.today(),
            )
            .all()
        )

        details = []
        for leave_type in policy.leave_types:
            scheduled = sum(r.total_hours for r in upcoming if r.leave_type_id == leave_type.id)
            details.append(LeaveDetail(
                leave_type_id=leave_type.id,
                leave_name=leave_type.name,
                total_hours=leave_type.default_hours,
                remaining_hours=remaining.get(leave_type.id, 0.0),
                scheduled_hours=scheduled,
            ))
        return details

    def get_time_off_requests(self, employee_id: int) -> TimeOffRequestsPartition:
        employee = get_employee(self.db, self.company_id, employee_id)
        requests = (
            self.db.query(TimeOffRequest)
            .options(selectinload(TimeOffRequest.days), selectinload(TimeOffRequest.leave_type))
            .filter(TimeOffRequest.employee_profile_id == employee.id)
            .order_by(TimeOffRequest.start_date, TimeOffRequest.id)
            .all()
        )
        today = self.today()
        scheduled = [TimeOffRequestResponse.from_model(r) for r in requests if r.end_date >= today]
        history = [TimeOffRequestResponse.from_model(r) for r in requests if r.end_date < today]
        return TimeOffRequestsPartition(scheduled=scheduled, history=history)

    def delete_time_off_request(self, employee_id: int, request_id: int):
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self(self.membership, employee)

        request = (
            self.db.query(TimeOffRequest)
            .filter(TimeOffRequest.id == request_id, TimeOffRequest.employee_profile_id == employee.id)
            .first()
        )
        if not request:
            raise NotFoundError("Time off request not found")
        if request.status != TimeOffStatus.PENDING.value:
            raise InvalidStateError("Only pending requests can be withdrawn")

        self.db.query(TimeOffDay).filter(TimeOffDay.request_id == request.id).delete(synchronize_session=False)
        result = self.db.execute(
            delete(TimeOffRequest)
            .where(TimeOffRequest.id == request.id, TimeOffRequest.status == TimeOffStatus.PENDING.value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStateError("Only pending requests can be withdrawn")
        self.commit()
        self.log_info("Time off request withdrawn", employee_id=employee.id, time_off_request_id=request_id)
