"""Aggregation engine.

Every figure here is computed on demand from the attendance records; nothing
is cached or stored. All operations are read-only and give the same answer
for the same record set whatever order the store returns rows in.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceFilter, AttendanceRecord, AttendanceRow
from ..attendance.repository import AttendanceRepository
from ..attendance.rules import DEFAULT_POLICY, AttendancePolicy
from ..common.datetime_utils import date_range, days_in_month, month_bounds, now_local, round_hours, to_local
from ..core.constants import DEFAULT_TREND_DAYS, EXPORT_COLUMNS
from ..core.enums import AttendanceStatus
from ..users.model import User
from ..users.repository import UserRepository


@dataclass(frozen=True)
class AttendanceStats:
    total_days: int = 0
    present_days: int = 0
    late_days: int = 0
    half_days: int = 0
    total_hours: float = 0.0
    absent_days: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "totalDays": self.total_days,
            "presentDays": self.present_days,
            "lateDays": self.late_days,
            "halfDays": self.half_days,
            "totalWorkHours": self.total_hours,
        }
        if self.absent_days is not None:
            data["absentDays"] = self.absent_days
        return data


@dataclass(frozen=True)
class DailySnapshot:
    day: date
    total_employees: int
    present: int
    late: int
    absent: int
    absent_employees: Sequence[User] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "present": self.present, "absent": self.absent, "late": self.late}


@dataclass(frozen=True)
class TrendPoint:
    day: date
    present: int
    late: int

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "present": self.present, "late": self.late}


@dataclass(frozen=True)
class DepartmentStats:
    department: str
    total: int
    present: int
    late: int

    def to_dict(self) -> dict:
        return {"department": self.department, "total": self.total, "present": self.present, "late": self.late}


@dataclass(frozen=True)
class ExportData:
    rows: list[dict]
    filename: str
    columns: tuple[str, ...] = EXPORT_COLUMNS


def summarize(records: Iterable[AttendanceRecord], *, absent_days: Optional[int] = None) -> AttendanceStats:
    total = present = late = half = 0
    hours = 0.0
    for r in records:
        total += 1
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        elif r.status == AttendanceStatus.LATE:
            late += 1
        elif r.status == AttendanceStatus.HALF_DAY:
            half += 1
        hours += r.total_hours
    return AttendanceStats(
        total_days=total,
        present_days=present,
        late_days=late,
        half_days=half,
        total_hours=round_hours(hours),
        absent_days=absent_days,
    )


def elapsed_days_in_month(year: int, month: int, today: date) -> int:
    """Days of the month that have started by ``today``; future days are never absent."""
    if (year, month) < (today.year, today.month):
        return days_in_month(year, month)
    if (year, month) == (today.year, today.month):
        return today.day
    return 0


class ReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        policy: AttendancePolicy = DEFAULT_POLICY,
    ):
        self._attendance = attendance
        self._users = users
        self._policy = policy

    def today(self, now: datetime | None = None) -> date:
        return to_local(now or now_local(self._policy.timezone), self._policy.timezone).date()

    def _records(self, filters: AttendanceFilter) -> Sequence[AttendanceRow]:
        return self._attendance.query_records(filters)

    def monthly_summary(self, employee_id: int, *, year: int, month: int, today: date) -> AttendanceStats:
        start, end = month_bounds(year, month)
        rows = self._records(AttendanceFilter(employee_id=int(employee_id), start_date=start, end_date=end))
        absent = max(0, elapsed_days_in_month(year, month, today) - len(rows))
        return summarize((r.record for r in rows), absent_days=absent)

    def history_stats(self, employee_id: int, *, year: int | None, month: int | None, today: date) -> AttendanceStats:
        if year is not None and month is not None:
            return self.monthly_summary(employee_id, year=year, month=month, today=today)
        rows = self._records(AttendanceFilter(employee_id=int(employee_id)))
        return summarize(r.record for r in rows)

    def daily_snapshot(self, *, day: date) -> DailySnapshot:
        employees = list(self._users.list_employees())
        rows = self._records(AttendanceFilter(start_date=day, end_date=day))

        present = sum(1 for r in rows if r.record.has_checked_in)
        late = sum(1 for r in rows if r.record.status == AttendanceStatus.LATE)
        seen = {r.record.employee_id for r in rows}
        absent_employees = tuple(u for u in employees if u.user_id not in seen)

        return DailySnapshot(
            day=day,
            total_employees=len(employees),
            present=present,
            late=late,
            absent=len(absent_employees),
            absent_employees=absent_employees,
        )

    def weekly_trend(self, *, end: date, days: int = DEFAULT_TREND_DAYS) -> list[TrendPoint]:
        start = end - timedelta(days=days - 1)
        rows = self._records(AttendanceFilter(start_date=start, end_date=end))

        present: dict[date, int] = defaultdict(int)
        late: dict[date, int] = defaultdict(int)
        for r in rows:
            present[r.record.work_date] += 1
            if r.record.status == AttendanceStatus.LATE:
                late[r.record.work_date] += 1

        return [TrendPoint(day=d, present=present[d], late=late[d]) for d in date_range(start, end)]

    def department_rollup(self, *, year: int, month: int) -> list[DepartmentStats]:
        start, end = month_bounds(year, month)
        rows = self._records(AttendanceFilter(start_date=start, end_date=end))

        buckets: dict[str, list[int]] = defaultdict(lambda: [0, 0, 0])
        for r in rows:
            bucket = buckets[r.department or "Unassigned"]
            bucket[0] += 1
            if r.record.status == AttendanceStatus.PRESENT:
                bucket[1] += 1
            elif r.record.status == AttendanceStatus.LATE:
                bucket[2] += 1

        return [
            DepartmentStats(department=name, total=t, present=p, late=l)
            for name, (t, p, l) in sorted(buckets.items())
        ]

    def employee_dashboard(self, employee_id: int, *, now: datetime | None = None) -> dict:
        today = self.today(now)
        today_record = self._attendance.find_record(int(employee_id), today)

        if today_record is None or not today_record.has_checked_in:
            state = "not-checked-in"
        elif today_record.has_checked_out:
            state = "checked-out"
        else:
            state = "checked-in"

        month = self.monthly_summary(employee_id, year=today.year, month=today.month, today=today)
        recent = self._records(
            AttendanceFilter(
                employee_id=int(employee_id),
                start_date=today - timedelta(days=DEFAULT_TREND_DAYS - 1),
                end_date=today,
            )
        )

        return {
            "today": {
                "status": state,
                "checkInTime": today_record.check_in_time.isoformat() if today_record and today_record.check_in_time else None,
                "checkOutTime": today_record.check_out_time.isoformat() if today_record and today_record.check_out_time else None,
                "attendanceStatus": today_record.status.value if today_record else None,
            },
            "thisMonth": {
                "present": month.present_days,
                "late": month.late_days,
                "halfDay": month.half_days,
                "absent": month.absent_days,
                "totalHours": month.total_hours,
            },
            "recent": [r.record.to_dict() for r in recent],
        }

    def manager_dashboard(self, *, now: datetime | None = None) -> dict:
        today = self.today(now)
        snapshot = self.daily_snapshot(day=today)

        return {
            "totalEmployees": snapshot.total_employees,
            "today": snapshot.to_dict(),
            "weeklyTrend": [p.to_dict() for p in self.weekly_trend(end=today)],
            "departmentStats": [d.to_dict() for d in self.department_rollup(year=today.year, month=today.month)],
            "absentToday": [u.to_public_dict() for u in snapshot.absent_employees],
        }

    def _fmt_time(self, value: datetime | None) -> str:
        if value is None:
            return "-"
        return to_local(value, self._policy.timezone).strftime("%H:%M:%S")

    def build_export(
        self,
        *,
        start: date | None = None,
        end: date | None = None,
        department: str | None = None,
    ) -> ExportData:
        rows = self._records(AttendanceFilter(start_date=start, end_date=end, department=department))

        out_rows = [
            {
                "Date": r.record.work_date.isoformat(),
                "Name": r.employee_name,
                "Email": r.employee_email,
                "Department": r.department or "-",
                "Check In": self._fmt_time(r.record.check_in_time),
                "Check Out": self._fmt_time(r.record.check_out_time),
                "Work Hours": f"{r.record.total_hours:.2f}",
                "Status": r.record.status.value,
            }
            for r in rows
        ]

        start_s = start.isoformat() if start else "all"
        end_s = end.isoformat() if end else "all"
        return ExportData(rows=out_rows, filename=f"attendance_{start_s}_{end_s}.csv")
