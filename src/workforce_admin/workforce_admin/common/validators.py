from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import VALID_SESSION_COUNTS
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer id")
    if ident <= 0:
        raise ValidationError(f"{field_name} must be a positive id")
    return ident


def optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_id(value, field_name)


def require_session_count(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("session_count must be 0, 1 or 2")
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError("session_count must be 0, 1 or 2")
    # int(1.5) == 1, so compare back for non-string input.
    if not isinstance(value, str) and count != value:
        raise ValidationError("session_count must be 0, 1 or 2")
    if count not in VALID_SESSION_COUNTS:
        raise ValidationError("session_count must be 0, 1 or 2")
    return count


def require_date(value: Any, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid YYYY-MM-DD date")


def to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return amount


def require_period(month: Any, year: Any) -> tuple[int, int]:
    try:
        m = int(month)
        y = int(year)
    except (TypeError, ValueError):
        raise ValidationError("month and year must be integers")
    if not 1 <= m <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1 <= y <= 9998:
        raise ValidationError("year is out of range")
    return m, y


RATE_QUANTUM = Decimal("0.01")


def require_percentage(value: Any, field_name: str) -> Decimal:
    """A tax rate in [0, 100] with at most two decimal places."""
    rate = to_decimal(value, field_name)
    if not 0 <= rate <= 100:
        raise ValidationError(f"{field_name} must be a percentage between 0 and 100")
    if rate != rate.quantize(RATE_QUANTUM):
        raise ValidationError(f"{field_name} allows at most 2 decimal places")
    return rate


def optional_percentage(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return require_percentage(value, field_name)
