from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import CheckInStrategy, CheckOutStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_check_in(self, *, check_in_time: datetime, late_after: datetime) -> CheckInStrategy:
        if check_in_time <= late_after:
            return NormalStrategy()
        return LateStrategy()

    def for_check_out(self, *, total_hours: float, half_day_hours: float) -> CheckOutStrategy:
        if total_hours < half_day_hours:
            return HalfDayStrategy()
        return NormalStrategy()
