from __future__ import annotations

import csv
import io
from datetime import MAXYEAR, MINYEAR

from flask import Flask, jsonify, request

from ..common.auth import current_user_id, login_required, manager_required
from ..common.datetime_utils import parse_iso_date
from ..common.pagination import Pagination
from ..common.validators import parse_int_in_range, parse_limit, parse_positive_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..reports.service import ExportData
from .model import AttendanceFilter


def _optional_date(name: str):
    value = request.args.get(name)
    return parse_iso_date(value) if value else None


def _pagination(default_limit: int) -> Pagination:
    return Pagination(
        page=parse_positive_int(request.args.get("page"), "page", default=1),
        limit=parse_limit(request.args.get("limit"), default=default_limit),
    )


def _notes() -> str | None:
    data = request.get_json(silent=True) or {}
    notes = data.get("notes")
    return str(notes).strip() if notes is not None else None


def _status_filter() -> AttendanceStatus | None:
    value = request.args.get("status")
    if not value or value == "all":
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status {value!r}")


def _department_filter() -> str | None:
    value = (request.args.get("department") or "").strip()
    return None if not value or value == "all" else value


def register(app: Flask, container: Container) -> None:
    def _write_csv(data: ExportData):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=list(data.columns))
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={data.filename}"},
        )

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @login_required
    def checkin():
        record = container.attendance_service.check_in(current_user_id(), notes=_notes())
        suffix = " (Late)" if record.status == AttendanceStatus.LATE else ""
        return jsonify({"message": f"Checked in successfully{suffix}", "attendance": record.to_dict()})

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @login_required
    def checkout():
        record = container.attendance_service.check_out(current_user_id(), notes=_notes())
        return jsonify({"message": "Checked out successfully", "attendance": record.to_dict()})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        status = container.attendance_service.get_today_status(current_user_id())
        return jsonify(status.to_dict())

    @app.route("/api/attendance/my-history", methods=["GET"], endpoint="attendance_my_history")
    @login_required
    def my_history():
        month_s = request.args.get("month")
        year_s = request.args.get("year")
        month = year = None
        if month_s and year_s:
            month = parse_int_in_range(month_s, "month", minimum=1, maximum=12)
            year = parse_int_in_range(year_s, "year", minimum=MINYEAR, maximum=MAXYEAR)

        user_id = current_user_id()
        page = container.attendance_service.history(
            user_id, year=year, month=month, pagination=_pagination(DEFAULT_HISTORY_LIMIT)
        )
        stats = container.report_service.history_stats(
            user_id, year=year, month=month, today=container.report_service.today()
        )
        return jsonify(
            {
                "attendance": [r.record.to_dict() for r in page.items],
                "pagination": page.meta(),
                "stats": stats.to_dict(),
            }
        )

    @app.route("/api/attendance/all", methods=["GET"], endpoint="attendance_all")
    @manager_required
    def all_attendance():
        start = _optional_date("startDate")
        end = _optional_date("endDate")
        if start and end and end < start:
            raise ValidationError("endDate must not be earlier than startDate")

        filters = AttendanceFilter(
            start_date=start,
            end_date=end,
            status=_status_filter(),
            department=_department_filter(),
            search=(request.args.get("search") or "").strip() or None,
        )
        page = container.attendance_service.list_records(filters, _pagination(DEFAULT_LIST_LIMIT))
        return jsonify({"attendance": [r.to_dict() for r in page.items], "pagination": page.meta()})

    @app.route("/api/attendance/export", methods=["GET"], endpoint="attendance_export")
    @manager_required
    def export():
        start = _optional_date("startDate")
        end = _optional_date("endDate")
        if start and end and end < start:
            raise ValidationError("endDate must not be earlier than startDate")

        data = container.report_service.build_export(start=start, end=end, department=_department_filter())
        if request.args.get("format") == "csv":
            return _write_csv(data)
        return jsonify({"data": data.rows, "filename": data.filename, "columns": list(data.columns)})
