from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day.

    ``status`` and ``total_hours`` are derived from the two timestamps by
    :mod:`attendance.rules`; the service re-derives them before every
    write, so they never drift from the times.
    """

    employee_id: int
    work_date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    total_hours: float = 0.0
    notes: str = ""
    record_id: Optional[int] = None

    @property
    def has_checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def has_checked_out(self) -> bool:
        return self.check_out_time is not None

    def evolve(self, **changes) -> "AttendanceRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "status": self.status.value,
            "total_hours": self.total_hours,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model: a record joined with its employee (lists, rollups, export)."""

    record: AttendanceRecord
    employee_name: str
    employee_email: str
    department: Optional[str]
    employee_code: Optional[str] = None

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["employee"] = {
            "id": self.record.employee_id,
            "name": self.employee_name,
            "email": self.employee_email,
            "department": self.department,
            "employee_code": self.employee_code,
        }
        return data


@dataclass(frozen=True)
class AttendanceFilter:
    employee_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    department: Optional[str] = None
    search: Optional[str] = None
