from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def _check_max_length(value: str, field_name: str, max_len: Optional[int]) -> str:
    if max_len is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_non_empty(value: Optional[str], field_name: str, *, max_len: Optional[int] = None) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return _check_max_length(str(value).strip(), field_name, max_len)


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_text(value: Optional[str], field_name: str = "Value", *, max_len: Optional[int] = None) -> Optional[str]:
    """Strip a free-text field, mapping blanks to None."""
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    return _check_max_length(value, field_name, max_len)


def require_email(value: Optional[str], field_name: str = "Email", *, max_len: Optional[int] = None) -> str:
    value = require_non_empty(value, field_name, max_len=max_len)
    local, sep, domain = value.partition("@")
    if not sep or not local or "." not in domain:
        raise ValidationError(f"{field_name} is not a valid address")
    return value


def parse_positive_int(value, field_name: str) -> int:
    # bool is an int subclass; `true` is not a teacher id.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number <= 0:
        raise ValidationError(f"{field_name} must be a number")
    return number
