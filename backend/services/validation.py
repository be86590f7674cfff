# backend/services/validation.py
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from services.errors import ValidationError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INTEGER = re.compile(r"^[+-]?\d+$")

# Signed 64-bit, the widest INTEGER the supported databases store
MIN_INT = -(2 ** 63)
MAX_INT = 2 ** 63 - 1


def parse_date(value, field: str = "date") -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string; anything else is rejected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD form", field=field)
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"{field} is not a valid calendar date", field=field)


def parse_int(value, field: str) -> int:
    # bool is an int subclass; True is not a stock quantity
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _INTEGER.match(value.strip()):
        number = int(value.strip())
    else:
        raise ValidationError(f"{field} must be an integer", field=field)
    return check_int_range(number, field)


def check_int_range(number: int, field: str) -> int:
    if not MIN_INT <= number <= MAX_INT:
        raise ValidationError(f"{field} is out of range", field=field)
    return number


def parse_price(value, field: str = "price") -> str:
    """Validate a decimal price and return it as the exact text to store."""
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    text = value.strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"{field} must be a decimal number", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a decimal number", field=field)
    return text


def require_name(value, field: str = "name") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()
