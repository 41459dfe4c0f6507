from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def optional_trimmed(value: Optional[str]) -> Optional[str]:
    """Trimmed text, or None when missing/blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid") from None
