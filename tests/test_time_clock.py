import pytest
from datetime import datetime

from hrdesk.core.exceptions import InvalidInputError, InvalidStateError, NotAuthorizedError
from hrdesk.models.time_log import TimeLog
from hrdesk.services.membership import MembershipResolver
from hrdesk.services.time_clock import (
    NO_ACTIVE_CLOCK_IN,
    ClockState,
    TimeClockService,
    state_of,
    summarize,
    week_window,
)

HOUR_MS = 60 * 60 * 1000


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def worker(db_session, company, member_factory):
    _, comp, _ = company
    user, profile = member_factory(comp, first_name="Wes")
    membership = MembershipResolver(db_session).resolve(user.id, comp.id)
    return membership, profile


def test_summarize_ignores_incomplete_pairs():
    logs = [
        TimeLog(
            clock_in=datetime(2024, 5, 15, 9, 0),
            break_start=datetime(2024, 5, 15, 12, 0),
            break_end=datetime(2024, 5, 15, 12, 30),
            clock_out=datetime(2024, 5, 15, 17, 0),
        ),
        TimeLog(clock_in=datetime(2024, 5, 15, 18, 0), break_start=datetime(2024, 5, 15, 19, 0)),
    ]
    totals = summarize(logs)

    assert totals.work_ms == 8 * HOUR_MS
    assert totals.break_ms == 30 * 60 * 1000


def test_week_window_starts_on_sunday():
    start, end = week_window(datetime(2024, 5, 15, 10, 30))  # a Wednesday
    assert start == datetime(2024, 5, 12)
    assert end == datetime(2024, 5, 19)

    start, _ = week_window(datetime(2024, 5, 12, 0, 0))
    assert start == datetime(2024, 5, 12)


def test_state_of():
    assert state_of(None) == ClockState.IDLE
    assert state_of(TimeLog(clock_in=datetime(2024, 1, 1, 9))) == ClockState.CLOCKED_IN
    on_break = TimeLog(clock_in=datetime(2024, 1, 1, 9), break_start=datetime(2024, 1, 1, 12))
    assert state_of(on_break) == ClockState.ON_BREAK
    done = TimeLog(clock_in=datetime(2024, 1, 1, 9), clock_out=datetime(2024, 1, 1, 17))
    assert state_of(done) == ClockState.IDLE


def test_full_day_with_break(db_session, worker):
    membership, profile = worker
    clock = FakeClock(datetime(2024, 5, 15, 9, 0))
    service = TimeClockService(db_session, membership, clock=clock)

    service.update_time_log(profile.id, "clock-in")
    assert service.current_state(profile.id) == ClockState.CLOCKED_IN

    clock.now = datetime(2024, 5, 15, 12, 0)
    service.update_time_log(profile.id, "start-break")
    assert service.current_state(profile.id) == ClockState.ON_BREAK

    clock.now = datetime(2024, 5, 15, 12, 30)
    service.update_time_log(profile.id, "end-break")

    clock.now = datetime(2024, 5, 15, 17, 0)
    row = service.update_time_log(profile.id, "clock-out")
    assert row.clock_out == datetime(2024, 5, 15, 17, 0)

    clock.now = datetime(2024, 5, 15, 18, 0)
    work_log = service.work_log(profile.id)
    assert work_log.state == "Idle"
    assert work_log.daily.work_ms == 8 * HOUR_MS
    assert work_log.daily.break_ms == 30 * 60 * 1000
    assert work_log.weekly.work_ms == 8 * HOUR_MS
    assert work_log.current_work_log.id == row.id


def test_weekly_total_spans_days_but_daily_does_not(db_session, worker):
    membership, profile = worker
    clock = FakeClock(datetime(2024, 5, 13, 9, 0))  # Monday
    service = TimeClockService(db_session, membership, clock=clock)
    service.update_time_log(profile.id, "clock-in")
    clock.now = datetime(2024, 5, 13, 11, 0)
    service.update_time_log(profile.id, "clock-out")

    clock.now = datetime(2024, 5, 15, 9, 0)  # Wednesday
    service.update_time_log(profile.id, "clock-in")
    clock.now = datetime(2024, 5, 15, 10, 0)
    service.update_time_log(profile.id, "clock-out")

    work_log = service.work_log(profile.id)
    assert work_log.daily.work_ms == 1 * HOUR_MS
    assert work_log.weekly.work_ms == 3 * HOUR_MS


@pytest.mark.parametrize("action", ["start-break", "end-break", "clock-out"])
def test_actions_without_open_row_are_rejected(db_session, worker, action):
    membership, profile = worker
    service = TimeClockService(db_session, membership, clock=FakeClock(datetime(2024, 5, 15, 9, 0)))

    with pytest.raises(InvalidStateError) as exc:
        service.update_time_log(profile.id, action)
    assert exc.value.message == NO_ACTIVE_CLOCK_IN
    assert db_session.query(TimeLog).filter(TimeLog.employee_profile_id == profile.id).count() == 0


def test_second_clock_in_is_rejected(db_session, worker):
    membership, profile = worker
    service = TimeClockService(db_session, membership, clock=FakeClock(datetime(2024, 5, 15, 9, 0)))
    service.update_time_log(profile.id, "clock-in")

    with pytest.raises(InvalidStateError):
        service.update_time_log(profile.id, "clock-in")
    assert db_session.query(TimeLog).filter(TimeLog.employee_profile_id == profile.id).count() == 1


def test_break_cannot_start_twice(db_session, worker):
    membership, profile = worker
    clock = FakeClock(datetime(2024, 5, 15, 9, 0))
    service = TimeClockService(db_session, membership, clock=clock)
    service.update_time_log(profile.id, "clock-in")
    clock.now = datetime(2024, 5, 15, 12, 0)
    service.update_time_log(profile.id, "start-break")

    clock.now = datetime(2024, 5, 15, 12, 10)
    with pytest.raises(InvalidStateError):
        service.update_time_log(profile.id, "start-break")


def test_break_cannot_end_twice(db_session, worker):
    membership, profile = worker
    clock = FakeClock(datetime(2024, 5, 15, 9, 0))
    service = TimeClockService(db_session, membership, clock=clock)
    service.update_time_log(profile.id, "clock-in")
    clock.now = datetime(2024, 5, 15, 12, 0)
    service.update_time_log(profile.id, "start-break")
    clock.now = datetime(2024, 5, 15, 12, 30)
    row = service.update_time_log(profile.id, "end-break")

    clock.now = datetime(2024, 5, 15, 15, 0)
    with pytest.raises(InvalidStateError):
        service.update_time_log(profile.id, "end-break")

    db_session.refresh(row)
    assert row.break_end == datetime(2024, 5, 15, 12, 30)
    assert state_of(row) == ClockState.CLOCKED_IN


def test_invalid_action(db_session, worker):
    membership, profile = worker
    with pytest.raises(InvalidInputError):
        TimeClockService(db_session, membership).update_time_log(profile.id, "lunch")


def test_only_the_employee_can_punch(db_session, company, worker):
    owner, comp, _ = company
    _, profile = worker
    as_owner = MembershipResolver(db_session).resolve(owner.id, comp.id)

    with pytest.raises(NotAuthorizedError):
        TimeClockService(db_session, as_owner).update_time_log(profile.id, "clock-in")


def test_time_logs_api(client, company, member_factory, auth_headers):
    _, comp, _ = company
    user, profile = member_factory(comp, first_name="Tia")
    base = f"/api/companies/{comp.id}/employees/{profile.id}/time-logs"
    headers = auth_headers(user)

    response = client.post(base, json={"action": "clock-out"}, headers=headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE"

    response = client.post(base, json={"action": "clock-in"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["clock_out"] is None

    response = client.get(f"{base}/state", headers=headers)
    assert response.json()["data"]["state"] == "ClockedIn"

    response = client.get(base, headers=headers)
    assert len(response.json()["data"]) == 1
