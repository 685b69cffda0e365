from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..common.pagination import Pagination
from .model import AttendanceFilter, AttendanceRecord, AttendanceRow


class AttendanceRepository(Protocol):
    """Store contract for attendance records.

    Implementations must enforce one record per (employee_id, work_date) in the
    store itself; a racing insert fails with ``DuplicateRecordError``. Store
    outages surface as ``StoreUnavailableError``. Nothing here retries.
    """

    def find_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_record(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert when ``record.record_id`` is None, otherwise update in place."""

        raise NotImplementedError

    def query_records(
        self,
        filters: AttendanceFilter,
        pagination: Optional[Pagination] = None,
    ) -> Sequence[AttendanceRow]:
        """Rows sorted by work date descending; all matches when not paginated."""

        raise NotImplementedError

    def count_records(self, filters: AttendanceFilter) -> int:
        raise NotImplementedError
