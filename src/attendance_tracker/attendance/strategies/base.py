from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ...core.enums import AttendanceStatus


class CheckInStrategy(ABC):
    """Strategy Pattern: decide the status a check-in opens the day with."""

    @abstractmethod
    def decide_check_in(self, *, check_in_time: datetime, late_after: datetime) -> AttendanceStatus:
        raise NotImplementedError


class CheckOutStrategy(ABC):
    """Strategy Pattern: decide the final status once the day is closed."""

    @abstractmethod
    def decide_check_out(self, *, total_hours: float, current: AttendanceStatus) -> AttendanceStatus:
        raise NotImplementedError
