from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.rules import DEFAULT_POLICY, AttendancePolicy
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_EVENT_QUEUE_SIZE
from .database.connection import DatabaseConnection
from .notifications.hub import NotificationHub
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    policy: AttendancePolicy

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    notification_hub: NotificationHub

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    report_service: ReportService


def assemble(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    policy: AttendancePolicy = DEFAULT_POLICY,
    notification_hub: NotificationHub | None = None,
    conn: DatabaseConnection | None = None,
) -> Container:
    """Wire services around already-built repositories (tests pass fakes here)."""
    hub = notification_hub or NotificationHub(queue_size=DEFAULT_EVENT_QUEUE_SIZE)

    return Container(
        conn=conn,
        policy=policy,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        notification_hub=hub,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            users_repo,
            hub,
            policy=policy,
            strategy_factory=AttendanceStrategyFactory(),
        ),
        report_service=ReportService(attendance_repo, users_repo, policy=policy),
    )


def build_container(
    *,
    conn: DatabaseConnection,
    policy: AttendancePolicy = DEFAULT_POLICY,
    event_queue_size: int = DEFAULT_EVENT_QUEUE_SIZE,
) -> Container:
    return assemble(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        policy=policy,
        notification_hub=NotificationHub(queue_size=event_queue_size),
        conn=conn,
    )
