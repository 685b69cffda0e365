from __future__ import annotations

import re

from ..core.constants import MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str, field_name: str = "Email") -> str:
    value = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(value):
        raise ValidationError(f"{field_name} is not a valid address")
    return value


def parse_positive_int(value, field_name: str, *, default: int, maximum: int | None = None) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number < 1:
        raise ValidationError(f"{field_name} must be positive")
    if maximum is not None:
        number = min(number, maximum)
    return number


def parse_limit(value, *, default: int) -> int:
    return parse_positive_int(value, "limit", default=default, maximum=MAX_PAGE_LIMIT)


def parse_int_in_range(value, field_name: str, *, minimum: int, maximum: int) -> int:
    """Strict bounded integer; out-of-range input is rejected, never clamped."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if not minimum <= number <= maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return number
