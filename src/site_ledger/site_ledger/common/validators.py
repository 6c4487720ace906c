from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} must not be empty")
    return str(value).strip()


def to_number(value: Any) -> float:
    """Coerce form/JSON input to a float; anything non-numeric becomes 0."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


def require_rate(value: Any, field_name: str) -> float:
    rate = to_number(value)
    if rate < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return rate


def require_count(value: Any, field_name: str) -> int:
    count = to_number(value)
    if count < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    if count != int(count):
        raise ValidationError(f"{field_name} must be a whole number")
    return int(count)
