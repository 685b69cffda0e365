from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import CheckOutStrategy


class HalfDayStrategy(CheckOutStrategy):
    """Short day on check-out; overrides present and late alike."""

    def decide_check_out(self, *, total_hours: float, current: AttendanceStatus) -> AttendanceStatus:
        return AttendanceStatus.HALF_DAY
