from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import CheckInStrategy


class LateStrategy(CheckInStrategy):
    def decide_check_in(self, *, check_in_time: datetime, late_after: datetime) -> AttendanceStatus:
        return AttendanceStatus.LATE
