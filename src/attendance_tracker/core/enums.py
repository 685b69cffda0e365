from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    EMPLOYEE = "employee"
    MANAGER = "manager"


class AttendanceStatus(str, Enum):
    """Attendance status persisted with each record.

    ABSENT is never written to a record; it is derived for days without one.
    """

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"


class EventKind(str, Enum):
    CHECK_IN = "attendance:checkin"
    CHECK_OUT = "attendance:checkout"
