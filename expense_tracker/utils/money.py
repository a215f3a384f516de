"""
Money utility functions.

All monetary values use :class:`decimal.Decimal` so that sums never
accumulate IEEE-754 floating-point drift.  Floats appear only at the
JSON boundary (:func:`decimal_to_float`) and currency strings only at
presentation time (:func:`format_money`).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

from expense_tracker.errors import ParseError


# ── Constants ────────────────────────────────────────────────────────────────

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
TENTH = Decimal("0.1")

DEFAULT_CURRENCY_SYMBOL = "₹"


# ── Conversion ───────────────────────────────────────────────────────────────

def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    """
    Safely convert a raw value to :class:`~decimal.Decimal`.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal('0.1')``
    rather than its binary expansion.

    Raises
    ------
    ParseError
        If *value* is a bool, not finite, or cannot be read as a number.
    """
    if isinstance(value, bool):
        raise ParseError(f"Cannot convert {value!r} to Decimal.")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise ParseError(f"Cannot convert {value!r} to Decimal: {exc}") from exc
    if not result.is_finite():
        raise ParseError(f"Amount {value!r} is not a finite number.")
    return result


def decimal_to_float(value: Decimal) -> float:
    """Convert Decimal → float for JSON serialisation."""
    return float(value)


# ── Aggregation ──────────────────────────────────────────────────────────────

def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    """
    Exact sum of *amounts*.

    Decimal addition at these magnitudes is exact, so the result does not
    depend on iteration order.
    """
    return sum(amounts, ZERO)


def percentage(value: Decimal, total: Decimal) -> Decimal:
    """
    Share of *value* in *total*, in percent, rounded half-up to one decimal.

    Returns ``Decimal('0.0')`` when *total* is zero instead of raising.

    Examples
    --------
    >>> percentage(Decimal("150"), Decimal("150"))
    Decimal('100.0')
    >>> percentage(Decimal("1"), Decimal("3"))
    Decimal('33.3')
    """
    if total == ZERO:
        return ZERO.quantize(TENTH)
    return (value / total * HUNDRED).quantize(TENTH, rounding=ROUND_HALF_UP)


# ── Presentation ─────────────────────────────────────────────────────────────

def format_money(amount: Decimal, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Render *amount* with thousands grouping and two decimals.

    >>> format_money(Decimal("1234.5"))
    '₹1,234.50'
    """
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < ZERO else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def format_percentage(value: Decimal) -> str:
    """One-decimal string form used in breakdown payloads (``"100.0"``)."""
    return f"{value.quantize(TENTH, rounding=ROUND_HALF_UP):.1f}"
