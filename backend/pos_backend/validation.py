from __future__ import annotations

from decimal import Decimal, InvalidOperation as InvalidDecimal
from typing import Any, Iterable

from .services.errors import InvalidInput


def is_missing(value: Any) -> bool:
    """
    True for values a request may not leave empty: None, blank strings and
    numeric zero.

    Zero counts as missing so that a zero quantity_change is rejected the same
    way as an absent one.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (int, float, Decimal)):
        return value == 0
    return False


def coerce_int(value: Any, field: str) -> int:
    """Strict integer coercion: rejects bools, floats, decimals and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidInput(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise InvalidInput(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise InvalidInput(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise InvalidInput(f"{field} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise InvalidInput(f"{field} must be an integer, not a decimal")
    raise InvalidInput(f"{field} must be an integer")


def coerce_decimal(value: Any, field: str) -> Decimal:
    """
    Decimal coercion for money, quantities and rates.

    Floats go through str() so 1.5 becomes Decimal("1.5") rather than its
    binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidDecimal:
            raise InvalidInput(f"{field} must be a number")
    else:
        raise InvalidInput(f"{field} must be a number")

    if not result.is_finite():
        raise InvalidInput(f"{field} must be a finite number")
    return result


def coerce_choice(value: Any, field: str, choices: Iterable[str]) -> str:
    choices = tuple(choices)
    if not isinstance(value, str) or value not in choices:
        quoted = [f"'{c}'" for c in choices]
        if len(quoted) > 1:
            allowed = ", ".join(quoted[:-1]) + (", or " if len(quoted) > 2 else " or ") + quoted[-1]
        else:
            allowed = quoted[0]
        raise InvalidInput(f"{field} must be {allowed}")
    return value


def clean_text(value: Any, field: str, *, max_length: int | None = None) -> str | None:
    """Strip free text; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        raise InvalidInput(f"{field} exceeds max length {max_length}")
    return text
