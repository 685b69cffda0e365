"""Attendance state logic.

Pure functions that turn raw check-in/check-out instants into a status and a
number of worked hours. Nothing here touches the store, so every rule can be
exercised directly in unit tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import round_hours, to_local
from ..core.constants import DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORK_START
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidOrderError
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord

_HOUR = Decimal(3600 * 1_000_000)


@dataclass(frozen=True)
class AttendancePolicy:
    """Organization-wide working rules.

    Lateness is judged on the wall clock of ``timezone``: a check-in is on time
    up to and including ``work_start + late_grace_minutes``.
    """

    work_start: time = DEFAULT_WORK_START
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS
    timezone: tzinfo = field(default=timezone.utc)

    def work_date_for(self, instant: datetime) -> date:
        return to_local(instant, self.timezone).date()

    def late_after(self, work_date: date) -> datetime:
        start = datetime.combine(work_date, self.work_start, tzinfo=self.timezone)
        return start + timedelta(minutes=self.late_grace_minutes)


DEFAULT_POLICY = AttendancePolicy()


def compute_total_hours(check_in_time: datetime, check_out_time: datetime) -> float:
    """Elapsed hours between the two instants, rounded to two decimals."""
    if check_out_time < check_in_time:
        raise InvalidOrderError()
    micros = (check_out_time - check_in_time) // timedelta(microseconds=1)
    return round_hours(Decimal(micros) / _HOUR)


def derive_check_in_status(
    check_in_time: datetime,
    policy: AttendancePolicy = DEFAULT_POLICY,
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> AttendanceStatus:
    factory = factory or AttendanceStrategyFactory()
    local = to_local(check_in_time, policy.timezone)
    late_after = policy.late_after(local.date())
    strategy = factory.for_check_in(check_in_time=local, late_after=late_after)
    return strategy.decide_check_in(check_in_time=local, late_after=late_after)


def derive_check_out(
    check_in_time: datetime,
    check_out_time: datetime,
    current_status: AttendanceStatus,
    policy: AttendancePolicy = DEFAULT_POLICY,
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> tuple[float, AttendanceStatus]:
    """Return ``(total_hours, final_status)`` for a completed day."""
    factory = factory or AttendanceStrategyFactory()
    total_hours = compute_total_hours(check_in_time, check_out_time)
    strategy = factory.for_check_out(total_hours=total_hours, half_day_hours=policy.half_day_hours)
    return total_hours, strategy.decide_check_out(total_hours=total_hours, current=current_status)


def apply_rules(
    record: AttendanceRecord,
    policy: AttendancePolicy = DEFAULT_POLICY,
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> AttendanceRecord:
    """Re-derive status and hours of ``record`` from its timestamps."""
    if record.check_in_time is None:
        if record.check_out_time is not None:
            raise InvalidOrderError("Check-out recorded without a check-in")
        return record.evolve(status=AttendanceStatus.PRESENT, total_hours=0.0)

    status = derive_check_in_status(record.check_in_time, policy, factory=factory)
    if record.check_out_time is None:
        return record.evolve(status=status, total_hours=0.0)

    total_hours, status = derive_check_out(
        record.check_in_time, record.check_out_time, status, policy, factory=factory
    )
    return record.evolve(status=status, total_hours=total_hours)
