from __future__ import annotations

from functools import wraps

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


def current_user_id() -> int:
    if "user_id" not in session:
        raise AuthenticationError("Please log in to continue")
    return int(session["user_id"])


def current_role() -> Role:
    current_user_id()
    return Role(session.get("role", Role.EMPLOYEE.value))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    """Allow only the given roles; anonymous callers get 401, others 403."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_role() not in roles:
                raise AuthorizationError(f"Requires role: {', '.join(r.value for r in roles)}")
            return view(*args, **kwargs)

        return wrapper

    return decorator


manager_required = role_required(Role.MANAGER)
