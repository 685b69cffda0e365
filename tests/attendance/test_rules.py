from datetime import date, datetime, time, timedelta, timezone

import pytest

from attendance_tracker.attendance.model import AttendanceRecord
from attendance_tracker.attendance.rules import (
    AttendancePolicy,
    apply_rules,
    compute_total_hours,
    derive_check_in_status,
    derive_check_out,
)
from attendance_tracker.core.enums import AttendanceStatus
from attendance_tracker.core.exceptions import InvalidOrderError

UTC = timezone.utc


def _at(hour, minute=0, second=0, *, day=10, tz=UTC):
    return datetime(2026, 3, day, hour, minute, second, tzinfo=tz)


def test_check_in_exactly_at_work_start_is_present(policy):
    assert derive_check_in_status(_at(9, 0, 0), policy) == AttendanceStatus.PRESENT


def test_check_in_one_second_after_work_start_is_late(policy):
    assert derive_check_in_status(_at(9, 0, 1), policy) == AttendanceStatus.LATE


def test_grace_minutes_extend_the_on_time_window():
    policy = AttendancePolicy(late_grace_minutes=5, timezone=UTC)

    assert derive_check_in_status(_at(9, 5, 0), policy) == AttendanceStatus.PRESENT
    assert derive_check_in_status(_at(9, 5, 1), policy) == AttendanceStatus.LATE


def test_lateness_is_judged_on_local_wall_clock():
    plus7 = timezone(timedelta(hours=7))
    policy = AttendancePolicy(timezone=plus7)

    # 02:30 UTC is 09:30 in UTC+7
    assert derive_check_in_status(_at(2, 30), policy) == AttendanceStatus.LATE
    # 01:59 UTC is 08:59 in UTC+7
    assert derive_check_in_status(_at(1, 59), policy) == AttendanceStatus.PRESENT
    assert policy.work_date_for(datetime(2026, 3, 9, 20, 0, tzinfo=UTC)) == date(2026, 3, 10)


def test_custom_work_start():
    policy = AttendancePolicy(work_start=time(8, 30), timezone=UTC)

    assert derive_check_in_status(_at(8, 45), policy) == AttendanceStatus.LATE


def test_total_hours_rounds_half_up_to_two_decimals():
    assert compute_total_hours(_at(9), _at(17, 30)) == 8.5
    # 1/3 hour
    assert compute_total_hours(_at(9), _at(9, 20)) == 0.33
    # 27 seconds = 0.0075 h
    assert compute_total_hours(_at(9), _at(9, 0, 27)) == 0.01
    assert compute_total_hours(_at(9), _at(9)) == 0.0


def test_total_hours_rejects_checkout_before_checkin():
    with pytest.raises(InvalidOrderError):
        compute_total_hours(_at(17), _at(9))


def test_short_late_day_becomes_half_day(policy):
    hours, status = derive_check_out(_at(9, 10), _at(13), AttendanceStatus.LATE, policy)

    assert hours == 3.83
    assert status == AttendanceStatus.HALF_DAY


def test_full_day_keeps_check_in_status(policy):
    hours, status = derive_check_out(_at(8, 55), _at(18, 0), AttendanceStatus.PRESENT, policy)

    assert hours == 9.08
    assert status == AttendanceStatus.PRESENT

    hours, status = derive_check_out(_at(9, 30), _at(18, 0), AttendanceStatus.LATE, policy)
    assert hours == 8.5
    assert status == AttendanceStatus.LATE


def test_exactly_half_day_threshold_is_not_half_day(policy):
    _, status = derive_check_out(_at(9), _at(13), AttendanceStatus.PRESENT, policy)

    assert status == AttendanceStatus.PRESENT


def test_apply_rules_rederives_from_timestamps(policy):
    stale = AttendanceRecord(
        employee_id=1,
        work_date=date(2026, 3, 10),
        check_in_time=_at(9, 15),
        check_out_time=_at(11),
        status=AttendanceStatus.PRESENT,
        total_hours=99.0,
    )

    fresh = apply_rules(stale, policy)

    assert fresh.status == AttendanceStatus.HALF_DAY
    assert fresh.total_hours == 1.75
    assert apply_rules(fresh, policy) == fresh


def test_apply_rules_open_day_has_zero_hours(policy):
    record = AttendanceRecord(employee_id=1, work_date=date(2026, 3, 10), check_in_time=_at(9, 1))

    derived = apply_rules(record, policy)

    assert derived.status == AttendanceStatus.LATE
    assert derived.total_hours == 0.0


def test_apply_rules_rejects_checkout_without_checkin(policy):
    record = AttendanceRecord(employee_id=1, work_date=date(2026, 3, 10), check_out_time=_at(17))

    with pytest.raises(InvalidOrderError):
        apply_rules(record, policy)
