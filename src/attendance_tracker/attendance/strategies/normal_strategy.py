from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import CheckInStrategy, CheckOutStrategy


class NormalStrategy(CheckInStrategy, CheckOutStrategy):
    """On-time check-in, normal check-out."""

    def decide_check_in(self, *, check_in_time: datetime, late_after: datetime) -> AttendanceStatus:
        return AttendanceStatus.PRESENT

    def decide_check_out(self, *, total_hours: float, current: AttendanceStatus) -> AttendanceStatus:
        return current
