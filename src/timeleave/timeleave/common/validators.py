from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_date_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise ValidationError(f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}")


def require_non_negative_minutes(value: int, field_name: str) -> int:
    if value is None or int(value) < 0:
        raise ValidationError(f"{field_name} must be >= 0 minutes")
    return int(value)


def require_non_negative_days(value: Optional[Decimal], field_name: str) -> Optional[Decimal]:
    if value is None:
        return None
    days = Decimal(value)
    if days < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return days
