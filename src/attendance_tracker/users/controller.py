from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.auth import current_user_id, login_required, manager_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = request.get_json(silent=True) or {}
        role_s = data.get("role") or Role.EMPLOYEE.value
        try:
            role = Role(role_s)
        except ValueError:
            raise ValidationError("Unknown role")

        current_role = Role(session["role"]) if "role" in session else None
        user = container.user_service.register(
            full_name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            department=data.get("department"),
            employee_code=data.get("employeeId") or data.get("employee_code"),
            role=role,
            current_role=current_role,
        )
        return jsonify({"message": "Registered successfully", "user": user.to_public_dict()}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = request.get_json(silent=True) or {}
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["department"] = s_user.department

        user = container.user_service.get_user(s_user.user_id)
        return jsonify({"message": "Logged in", "user": user.to_public_dict()})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        user = container.user_service.get_user(current_user_id())
        return jsonify({"user": user.to_public_dict()})

    @app.route("/api/users/employees", methods=["GET"], endpoint="users_employees")
    @manager_required
    def users_employees():
        department = (request.args.get("department") or "").strip() or None
        employees = container.user_service.list_employees(department=department)
        return jsonify(
            {
                "employees": [u.to_public_dict() for u in employees],
                "total": container.user_service.count_employees(department=department),
            }
        )

    @app.route("/api/users/departments", methods=["GET"], endpoint="users_departments")
    @manager_required
    def users_departments():
        return jsonify({"departments": container.user_service.list_departments()})
