# utils/fields.py
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from stockledger.exceptions import ValidationError


def to_decimal(x, field: str = "amount") -> Decimal:
    try:
        return Decimal(str(x or 0))
    except InvalidOperation as e:
        raise ValidationError(field, f"not a number: {x!r}") from e


def to_int(x, field: str = "value") -> int:
    if x is None or x == "":
        return 0
    if isinstance(x, (float, Decimal)):
        # whole-valued only; 2.9 is a typo, not 2
        try:
            whole = int(x)
        except (ValueError, OverflowError) as e:
            raise ValidationError(field, f"not an integer: {x!r}") from e
        if whole != x:
            raise ValidationError(field, f"not an integer: {x!r}")
        return whole
    try:
        return int(x)
    except (TypeError, ValueError) as e:
        raise ValidationError(field, f"not an integer: {x!r}") from e


def to_text(x) -> str:
    return "" if x is None else str(x).strip()


def require(fields: dict, name: str) -> str:
    """Return the stripped text value of a required field or raise."""
    value = to_text(fields.get(name))
    if not value:
        raise ValidationError(name, "is required")
    return value


def parse_date(value, field: str = "date") -> date | None:
    """Accept a date, a datetime or a ``YYYY-MM-DD`` string."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(field, f"expected YYYY-MM-DD, got {value!r}") from e
