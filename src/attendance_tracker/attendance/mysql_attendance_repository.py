from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..common.pagination import Pagination
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceFilter, AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    ar.attendance_id, ar.user_id, ar.work_date, ar.check_in_time, ar.check_out_time,
    ar.status, ar.total_hours, ar.notes
"""


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["attendance_id"]),
        employee_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=from_utc_naive(r.get("check_in_time")),
        check_out_time=from_utc_naive(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        total_hours=float(r.get("total_hours") or 0),
        notes=r.get("notes") or "",
    )


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _utc_or_none(value):
    return to_utc_naive(value) if value is not None else None


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records ar
                WHERE ar.user_id=%s AND ar.work_date=%s
                """,
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_record(self, record: AttendanceRecord) -> AttendanceRecord:
        params = (
            _utc_or_none(record.check_in_time),
            _utc_or_none(record.check_out_time),
            record.status.value,
            record.total_hours,
            record.notes,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if record.record_id is None:
                # Plain INSERT: the UNIQUE(user_id, work_date) key rejects a racing twin.
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, work_date, check_in_time, check_out_time, status, total_hours, notes)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (record.employee_id, record.work_date, *params),
                )
                return record.evolve(record_id=int(cur.lastrowid))

            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, status=%s, total_hours=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (*params, int(record.record_id)),
            )
            return record

    def _where(self, filters: AttendanceFilter) -> tuple[str, list[object]]:
        clauses: list[str] = ["1=1"]
        params: list[object] = []

        if filters.employee_id is not None:
            clauses.append("ar.user_id=%s")
            params.append(int(filters.employee_id))
        if filters.start_date is not None:
            clauses.append("ar.work_date >= %s")
            params.append(filters.start_date)
        if filters.end_date is not None:
            clauses.append("ar.work_date <= %s")
            params.append(filters.end_date)
        if filters.status is not None:
            clauses.append("ar.status=%s")
            params.append(filters.status.value)
        if filters.department:
            clauses.append("u.department=%s")
            params.append(filters.department)
        if filters.search:
            clauses.append(r"(LOWER(u.full_name) LIKE %s ESCAPE '\\' OR LOWER(u.email) LIKE %s ESCAPE '\\')")
            needle = f"%{_escape_like(filters.search.strip().lower())}%"
            params.extend([needle, needle])

        return " AND ".join(clauses), params

    def query_records(
        self,
        filters: AttendanceFilter,
        pagination: Optional[Pagination] = None,
    ) -> Sequence[AttendanceRow]:
        where, params = self._where(filters)
        limit_sql = ""
        if pagination is not None:
            limit_sql = "LIMIT %s OFFSET %s"
            params.extend([int(pagination.limit), int(pagination.offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS},
                       u.full_name, u.email, u.department, u.employee_code
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                WHERE {where}
                ORDER BY ar.work_date DESC, ar.user_id ASC
                {limit_sql}
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceRow(
                    record=_to_record(r),
                    employee_name=r["full_name"],
                    employee_email=r["email"],
                    department=r.get("department"),
                    employee_code=r.get("employee_code"),
                )
                for r in rows
            ]

    def count_records(self, filters: AttendanceFilter) -> int:
        where, params = self._where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                WHERE {where}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0
