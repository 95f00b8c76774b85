"""Decimal utilities for financial calculations.

All monetary calculations must use Decimal to avoid floating-point precision issues.
Values read from the POS database arrive as floats (SQLite REAL columns) or
as JSON numbers inside line items; both go through ``safe_decimal`` or
``to_decimal`` before they are summed.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: object) -> Decimal:
    """Convert a numeric value to Decimal, rejecting anything non-numeric.

    Booleans are rejected even though they are ints in Python, since a
    ``true`` in a JSON price field is a data error, not the number 1.

    Args:
        value: int, float, Decimal, or numeric string.

    Returns:
        Decimal value.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")

    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, (int, float, str)):
            # Convert float to string first for precision
            result = Decimal(str(value).strip())
        else:
            raise ValueError(f"Not a number: {value!r}")
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def safe_decimal(value: Optional[object], default: Decimal = ZERO) -> Decimal:
    """Safely convert a value to Decimal.

    Args:
        value: Value to convert (string, int, float, or None).
        default: Default value if conversion fails.

    Returns:
        Decimal value or default.
    """
    if value is None:
        return default

    try:
        return to_decimal(value)
    except ValueError:
        return default


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return ``part`` as a percentage of ``whole``.

    A zero whole yields 0 rather than an error; callers that need a
    different guard (e.g. ``whole > 0``) check before calling.

    Args:
        part: Numerator.
        whole: Denominator.

    Returns:
        ``part / whole * 100``, or 0 when ``whole`` is 0.
    """
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def round_money(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round an amount half-up to a fixed number of places."""
    return amount.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def format_currency(
    amount: Decimal,
    decimal_places: int = 2,
    currency_symbol: str = "",
) -> str:
    """Format a Decimal amount for display.

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places (default 2).
        currency_symbol: Optional symbol placed after the sign.

    Returns:
        Formatted string like "-$1,234.56" or "1,234.56".
    """
    rounded = round_money(amount, decimal_places)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{currency_symbol}{abs(rounded):,.{decimal_places}f}"


def format_percentage(value: Decimal, decimal_places: int = 2) -> str:
    """Format a percentage value like ``62.62%``."""
    return f"{round_money(value, decimal_places):.{decimal_places}f}%"


def sum_amounts(amounts: list[Decimal]) -> Decimal:
    """Sum a list of Decimal amounts.

    Args:
        amounts: List of Decimal amounts.

    Returns:
        Sum as Decimal.
    """
    total = ZERO
    for amount in amounts:
        total += amount
    return total
