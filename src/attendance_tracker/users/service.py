from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateRecordError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    department: Optional[str]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            department=user.department,
        )


class UserService:
    """Use case: register and look up accounts."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        department: Optional[str] = None,
        employee_code: Optional[str] = None,
        role: Role = Role.EMPLOYEE,
        current_role: Optional[Role] = None,
    ) -> User:
        full_name = require_non_empty(full_name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", 6)

        if role == Role.MANAGER and current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can create manager accounts")

        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered")

        employee_code = (employee_code or "").strip() or None
        if employee_code and self._users.get_by_employee_code(employee_code):
            raise ValidationError("Employee code is already registered")

        try:
            user_id = self._users.create_user(
                full_name=full_name,
                email=email,
                password_hash=generate_password_hash(password),
                role=role,
                department=(department or "").strip() or None,
                employee_code=employee_code,
            )
        except DuplicateRecordError:
            # lost a race on the unique email or employee code
            raise ValidationError("Email or employee code is already registered")
        logger.info("registered %s account %s (id=%s)", role.value, email, user_id)
        return self.get_user(user_id)

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def list_employees(self, *, department: Optional[str] = None) -> list[User]:
        return list(self._users.list_employees(department=department))

    def list_departments(self) -> list[str]:
        return list(self._users.list_departments())

    def count_employees(self, *, department: Optional[str] = None) -> int:
        return self._users.count_employees(department=department)
