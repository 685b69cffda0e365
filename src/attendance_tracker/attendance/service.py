from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import month_bounds, now_local, to_local
from ..common.pagination import Page, Pagination
from ..core.enums import EventKind
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    InvalidOrderError,
    NoCheckInFoundError,
    NotFoundError,
)
from ..notifications.events import AttendanceEvent, EventPublisher
from ..users.model import User
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceFilter, AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository
from .rules import DEFAULT_POLICY, AttendancePolicy, apply_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodayStatus:
    record: Optional[AttendanceRecord]

    @property
    def has_checked_in(self) -> bool:
        return bool(self.record and self.record.has_checked_in)

    @property
    def has_checked_out(self) -> bool:
        return bool(self.record and self.record.has_checked_out)

    def to_dict(self) -> dict:
        return {
            "attendance": self.record.to_dict() if self.record else None,
            "hasCheckedIn": self.has_checked_in,
            "hasCheckedOut": self.has_checked_out,
        }


class AttendanceService:
    """Check-in/check-out state machine per (employee, day).

    NoRecord -> CheckedIn -> CheckedOut; the last state is terminal for the day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        publisher: EventPublisher | None = None,
        *,
        policy: AttendancePolicy = DEFAULT_POLICY,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._users = users
        self._publisher = publisher
        self._policy = policy
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def policy(self) -> AttendancePolicy:
        return self._policy

    def _local_now(self, now: datetime | None) -> datetime:
        return to_local(now or now_local(self._policy.timezone), self._policy.timezone)

    def today(self, now: datetime | None = None) -> date:
        return self._local_now(now).date()

    def _get_employee(self, employee_id: int) -> User:
        user = self._users.get_by_id(int(employee_id))
        if not user or not user.is_active:
            raise NotFoundError("Employee not found")
        return user

    def check_in(self, employee_id: int, *, now: datetime | None = None, notes: str | None = None) -> AttendanceRecord:
        now = self._local_now(now)
        today = now.date()
        user = self._get_employee(employee_id)

        existing = self._attendance.find_record(user.user_id, today)
        if existing and existing.has_checked_in:
            raise AlreadyCheckedInError()

        base = existing or AttendanceRecord(employee_id=user.user_id, work_date=today)
        record = apply_rules(
            base.evolve(check_in_time=now, notes=notes if notes is not None else base.notes),
            self._policy,
            factory=self._factory,
        )
        saved = self._attendance.upsert_record(record)

        logger.info("employee %s checked in on %s: %s", user.user_id, today, saved.status.value)
        self._notify(EventKind.CHECK_IN, user, saved, now)
        return saved

    def check_out(self, employee_id: int, *, now: datetime | None = None, notes: str | None = None) -> AttendanceRecord:
        now = self._local_now(now)
        today = now.date()
        user = self._get_employee(employee_id)

        existing = self._attendance.find_record(user.user_id, today)
        if not existing or not existing.has_checked_in:
            raise NoCheckInFoundError()
        if existing.has_checked_out:
            raise AlreadyCheckedOutError()
        if now < existing.check_in_time:
            raise InvalidOrderError()

        record = apply_rules(
            existing.evolve(check_out_time=now, notes=notes if notes is not None else existing.notes),
            self._policy,
            factory=self._factory,
        )
        saved = self._attendance.upsert_record(record)

        logger.info(
            "employee %s checked out on %s: %.2f h, %s", user.user_id, today, saved.total_hours, saved.status.value
        )
        self._notify(EventKind.CHECK_OUT, user, saved, now)
        return saved

    def _notify(self, kind: EventKind, user: User, record: AttendanceRecord, when: datetime) -> None:
        if self._publisher is None:
            return
        event = AttendanceEvent(
            kind=kind,
            employee_id=user.user_id,
            employee_name=user.full_name,
            department=user.department,
            timestamp=when,
            status=record.status,
            total_hours=record.total_hours if kind == EventKind.CHECK_OUT else None,
        )
        try:
            self._publisher.publish_event(event)
        except Exception:
            # Delivery is best effort; the transition is already stored.
            logger.warning("failed to publish %s for employee %s", kind.value, user.user_id, exc_info=True)

    def get_today_status(self, employee_id: int, *, now: datetime | None = None) -> TodayStatus:
        today = self.today(now)
        return TodayStatus(record=self._attendance.find_record(int(employee_id), today))

    def history(
        self,
        employee_id: int,
        *,
        year: int | None = None,
        month: int | None = None,
        pagination: Pagination,
    ) -> Page[AttendanceRow]:
        start = end = None
        if year is not None and month is not None:
            start, end = month_bounds(year, month)
        filters = AttendanceFilter(employee_id=int(employee_id), start_date=start, end_date=end)
        return self.list_records(filters, pagination)

    def list_records(self, filters: AttendanceFilter, pagination: Pagination) -> Page[AttendanceRow]:
        """Filters (search included) apply before pagination, so a page is never short."""
        rows = self._attendance.query_records(filters, pagination)
        total = self._attendance.count_records(filters)
        return Page(items=rows, total=total, page=pagination.page, limit=pagination.limit)
