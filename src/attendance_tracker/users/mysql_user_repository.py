from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, full_name, email, password_hash, role, department, employee_code, is_active"


def _to_user(row: dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        employee_code=row.get("employee_code"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE employee_code=%s", (employee_code,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        employee_code: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, department, employee_code, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (full_name, email, password_hash, role.value, department, employee_code),
            )
            return int(cur.lastrowid)

    def _employee_where(self, department: Optional[str]) -> tuple[str, tuple]:
        if department:
            return "role='employee' AND is_active=1 AND department=%s", (department,)
        return "role='employee' AND is_active=1", ()

    def count_employees(self, *, department: Optional[str] = None) -> int:
        where, params = self._employee_where(department)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM users WHERE {where}", params)
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def list_employees(self, *, department: Optional[str] = None) -> Sequence[User]:
        where, params = self._employee_where(department)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {where} ORDER BY full_name ASC", params)
            return [_to_user(r) for r in fetchall(cur)]

    def list_departments(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT department FROM users WHERE department IS NOT NULL AND department<>'' ORDER BY department"
            )
            return [r["department"] for r in fetchall(cur)]
