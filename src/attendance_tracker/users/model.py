from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an employee or manager account.

    Note: Plain data object; no DB access code lives here.
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    employee_code: Optional[str] = None
    is_active: bool = True

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.full_name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "employee_code": self.employee_code,
        }
