from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for users.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def count_employees(self, *, department: Optional[str] = None) -> int:
        """Active users with the employee role."""

        raise NotImplementedError

    def list_employees(self, *, department: Optional[str] = None) -> Sequence[User]:
        raise NotImplementedError

    def list_departments(self) -> Sequence[str]:
        raise NotImplementedError
