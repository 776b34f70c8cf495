"""
Time clock: punch lifecycle per employee and daily/weekly work totals.

State is derived from the time_logs rows, never stored:
  Idle      no open row
  ClockedIn open row, break not started (or already ended)
  OnBreak   open row, break started and not ended
"""
import enum
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from hrdesk.core.exceptions import InvalidInputError, InvalidStateError
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.time_log import TimeLog
from hrdesk.schemas.time_log import TimeLogResponse, WorkLogResponse, WorkTotals
from hrdesk.services.base import BaseService
from hrdesk.services.employees import get_employee
from hrdesk.services.membership import (
    ResolvedMembership,
    require_self,
    require_self_manager_or_owner,
)

NO_ACTIVE_CLOCK_IN = "No active clock-in found"


class ClockAction(str, enum.Enum):
    CLOCK_IN = "clock-in"
    START_BREAK = "start-break"
    END_BREAK = "end-break"
    CLOCK_OUT = "clock-out"


class ClockState(str, enum.Enum):
    IDLE = "Idle"
    CLOCKED_IN = "ClockedIn"
    ON_BREAK = "OnBreak"


def parse_action(action: str) -> ClockAction:
    try:
        return ClockAction(action)
    except ValueError:
        raise InvalidInputError("Invalid action")


def day_window(now: datetime) -> Tuple[datetime, datetime]:
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def week_window(now: datetime) -> Tuple[datetime, datetime]:
    """Sunday 00:00 up to the following Sunday 00:00."""
    day_start, _ = day_window(now)
    days_since_sunday = (now.weekday() + 1) % 7
    start = day_start - timedelta(days=days_since_sunday)
    return start, start + timedelta(days=7)


def _ms(delta: timedelta) -> int:
    return delta // timedelta(milliseconds=1)


def summarize(logs: Iterable[TimeLog]) -> WorkTotals:
    """
    Sum clock_out - clock_in and break_end - break_start. A pair with either
    end missing contributes nothing.
    """
    work = timedelta(0)
    breaks = timedelta(0)
    for log in logs:
        if log.clock_in and log.clock_out:
            work += log.clock_out - log.clock_in
        if log.break_start and log.break_end:
            breaks += log.break_end - log.break_start
    return WorkTotals(work_ms=_ms(work), break_ms=_ms(breaks))


def state_of(log: Optional[TimeLog]) -> ClockState:
    if log is None or not log.is_open:
        return ClockState.IDLE
    if log.break_start is not None and log.break_end is None:
        return ClockState.ON_BREAK
    return ClockState.CLOCKED_IN


class TimeClockService(BaseService):
    def __init__(
        self,
        db: Session,
        membership: ResolvedMembership,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(db, membership.company_id)
        self.membership = membership
        self.clock = clock

    def _open_rows(self, employee_id: int):
        return (
            self.db.query(TimeLog)
            .filter(
                TimeLog.employee_profile_id == employee_id,
                TimeLog.clock_in.isnot(None),
                TimeLog.clock_out.is_(None),
            )
            .order_by(TimeLog.date.desc(), TimeLog.id.desc())
        )

    def _locked_open_row(self, employee_id: int, *criteria) -> TimeLog:
        row = self._open_rows(employee_id).filter(*criteria).with_for_update().first()
        if row is None:
            raise InvalidStateError(NO_ACTIVE_CLOCK_IN)
        return row

    def _apply(self, row: TimeLog, guard, **values):
        """Conditional write; zero rows matched means another request got there first."""
        result = self.db.execute(
            update(TimeLog)
            .where(TimeLog.id == row.id, TimeLog.clock_out.is_(None), *guard)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStateError(NO_ACTIVE_CLOCK_IN)

    def update_time_log(self, employee_id: int, action: str) -> TimeLog:
        clock_action = parse_action(action)
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self(self.membership, employee)

        now = self.clock()

        if clock_action == ClockAction.CLOCK_IN:
            # Serialize clock-ins for this employee on the profile row
            self.db.query(EmployeeProfile).filter(EmployeeProfile.id == employee.id).with_for_update().one()
            if self._open_rows(employee.id).first() is not None:
                raise InvalidStateError("Already clocked in")
            row = TimeLog(employee_profile_id=employee.id, date=now, clock_in=now)
            self.db.add(row)
        elif clock_action == ClockAction.START_BREAK:
            row = self._locked_open_row(employee.id, TimeLog.break_start.is_(None))
            self._apply(row, [TimeLog.break_start.is_(None)], break_start=now)
        elif clock_action == ClockAction.END_BREAK:
            on_break = [TimeLog.break_start.isnot(None), TimeLog.break_end.is_(None)]
            row = self._locked_open_row(employee.id, *on_break)
            self._apply(row, on_break, break_end=now)
        else:
            row = self._locked_open_row(employee.id)
            self._apply(row, [], clock_out=now)

        self.commit()
        self.db.refresh(row)
        self.log_info(
            "Time log updated",
            employee_id=employee.id, action=clock_action.value, time_log_id=row.id,
        )
        return row

    def _logs_between(self, employee_id: int, start: datetime, end: datetime) -> List[TimeLog]:
        return (
            self.db.query(TimeLog)
            .filter(
                TimeLog.employee_profile_id == employee_id,
                TimeLog.date >= start,
                TimeLog.date < end,
            )
            .all()
        )

    def _most_recent(self, employee_id: int) -> Optional[TimeLog]:
        return (
            self.db.query(TimeLog)
            .filter(TimeLog.employee_profile_id == employee_id)
            .order_by(TimeLog.date.desc(), TimeLog.id.desc())
            .first()
        )

    def work_log(self, employee_id: int) -> WorkLogResponse:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self_manager_or_owner(self.membership, employee)

        now = self.clock()
        daily = summarize(self._logs_between(employee.id, *day_window(now)))
        weekly = summarize(self._logs_between(employee.id, *week_window(now)))
        current = self._most_recent(employee.id)

        return WorkLogResponse(
            current_work_log=TimeLogResponse.model_validate(current) if current else None,
            state=self.current_state(employee.id).value,
            daily=daily,
            weekly=weekly,
        )

    def current_state(self, employee_id: int) -> ClockState:
        return state_of(self._open_rows(employee_id).first())

    def clock_state(self, employee_id: int) -> ClockState:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self_manager_or_owner(self.membership, employee)
        return self.current_state(employee.id)

    def list_time_logs(self, employee_id: int) -> List[TimeLog]:
        employee = get_employee(self.db, self.company_id, employee_id)
        return (
            self.db.query(TimeLog)
            .filter(TimeLog.employee_profile_id == employee.id)
            .order_by(TimeLog.date.desc(), TimeLog.id.desc())
            .all()
        )
