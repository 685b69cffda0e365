from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from attendance_tracker.attendance.model import AttendanceFilter, AttendanceRecord, AttendanceRow
from attendance_tracker.attendance.rules import AttendancePolicy
from attendance_tracker.common.pagination import Pagination
from attendance_tracker.core.enums import AttendanceStatus, Role
from attendance_tracker.core.exceptions import DuplicateRecordError
from attendance_tracker.users.model import User

UTC = timezone.utc


def make_user(user_id: int, name: str, *, department: str | None = "Engineering", role: Role = Role.EMPLOYEE, password: str | None = None) -> User:
    return User(
        user_id=user_id,
        full_name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password_hash=generate_password_hash(password, method="pbkdf2:sha256:1000") if password else "!",
        role=role,
        department=department,
        employee_code=f"EMP{user_id:03d}",
    )


@dataclass
class InMemoryUsers:
    users_by_id: dict[int, User] = field(default_factory=dict)

    def add(self, user: User) -> User:
        self.users_by_id[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.email == email), None)

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.employee_code == employee_code), None)

    def create_user(self, *, full_name, email, password_hash, role, department, employee_code) -> int:
        if self.get_by_email(email) or (employee_code and self.get_by_employee_code(employee_code)):
            raise DuplicateRecordError()
        user_id = max(self.users_by_id, default=0) + 1
        self.add(
            User(
                user_id=user_id,
                full_name=full_name,
                email=email,
                password_hash=password_hash,
                role=role,
                department=department,
                employee_code=employee_code,
            )
        )
        return user_id

    def list_employees(self, *, department: Optional[str] = None):
        users = [
            u
            for u in self.users_by_id.values()
            if u.role == Role.EMPLOYEE and u.is_active and (department is None or u.department == department)
        ]
        return sorted(users, key=lambda u: u.full_name)

    def count_employees(self, *, department: Optional[str] = None) -> int:
        return len(self.list_employees(department=department))

    def list_departments(self):
        return sorted({u.department for u in self.users_by_id.values() if u.department})


class InMemoryAttendance:
    """Dict-backed store honouring the one-record-per-day key like MySQL does."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self._lock = threading.Lock()
        self._rows: dict[int, AttendanceRecord] = {}
        self._next_id = 0

    def all(self) -> list[AttendanceRecord]:
        return list(self._rows.values())

    def find_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._find(employee_id, work_date)

    def _find(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self._rows.values() if r.employee_id == employee_id and r.work_date == work_date),
            None,
        )

    def upsert_record(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            if record.record_id is None:
                if self._find(record.employee_id, record.work_date):
                    raise DuplicateRecordError()
                self._next_id += 1
                record = record.evolve(record_id=self._next_id)
            self._rows[record.record_id] = record
            return record

    def _matches(self, r: AttendanceRecord, user: User, f: AttendanceFilter) -> bool:
        if f.employee_id is not None and r.employee_id != f.employee_id:
            return False
        if f.start_date is not None and r.work_date < f.start_date:
            return False
        if f.end_date is not None and r.work_date > f.end_date:
            return False
        if f.status is not None and r.status != f.status:
            return False
        if f.department and user.department != f.department:
            return False
        if f.search:
            needle = f.search.lower()
            if needle not in user.full_name.lower() and needle not in user.email.lower():
                return False
        return True

    def _filtered(self, filters: AttendanceFilter) -> list[AttendanceRow]:
        rows = []
        for r in self._rows.values():
            user = self._users.get_by_id(r.employee_id)
            if user and self._matches(r, user, filters):
                rows.append(
                    AttendanceRow(
                        record=r,
                        employee_name=user.full_name,
                        employee_email=user.email,
                        department=user.department,
                        employee_code=user.employee_code,
                    )
                )
        rows.sort(key=lambda row: row.record.employee_id)
        rows.sort(key=lambda row: row.record.work_date, reverse=True)
        return rows

    def query_records(self, filters: AttendanceFilter, pagination: Optional[Pagination] = None):
        rows = self._filtered(filters)
        if pagination is None:
            return rows
        return rows[pagination.offset : pagination.offset + pagination.limit]

    def count_records(self, filters: AttendanceFilter) -> int:
        return len(self._filtered(filters))


class RecordingPublisher:
    def __init__(self, *, fail: bool = False):
        self.events = []
        self._fail = fail

    def publish_event(self, event) -> int:
        if self._fail:
            raise RuntimeError("socket gone")
        self.events.append(event)
        return 1


def seed_record(
    repo: InMemoryAttendance,
    employee_id: int,
    day: date,
    *,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
    hours: float = 8.0,
    check_in: datetime | None = None,
    check_out: datetime | None = None,
) -> AttendanceRecord:
    check_in = check_in or datetime(day.year, day.month, day.day, 9, 0, tzinfo=UTC)
    return repo.upsert_record(
        AttendanceRecord(
            employee_id=employee_id,
            work_date=day,
            check_in_time=check_in,
            check_out_time=check_out,
            status=status,
            total_hours=hours,
        )
    )


@pytest.fixture
def policy() -> AttendancePolicy:
    return AttendancePolicy(timezone=UTC)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 8, 55, 0, tzinfo=UTC)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    users = InMemoryUsers()
    users.add(make_user(1, "Alice Nguyen", department="Engineering", password="secret1"))
    users.add(make_user(2, "Bob Tran", department="Sales"))
    users.add(make_user(3, "Carol Le", department="Engineering"))
    users.add(make_user(9, "Mona Manager", department="Management", role=Role.MANAGER, password="secret9"))
    return users


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
