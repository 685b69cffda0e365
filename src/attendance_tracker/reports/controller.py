from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_user_id, login_required, manager_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/employee", methods=["GET"], endpoint="dashboard_employee")
    @login_required
    def employee_dashboard():
        return jsonify(container.report_service.employee_dashboard(current_user_id()))

    @app.route("/api/dashboard/manager", methods=["GET"], endpoint="dashboard_manager")
    @manager_required
    def manager_dashboard():
        return jsonify(container.report_service.manager_dashboard())
