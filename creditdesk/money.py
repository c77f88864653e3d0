"""Peso amount helpers shared by the product form, the engine and the plan.

Amounts are whole Colombian pesos: the form shows them with "." as the
thousands separator and the engine rounds every quantity to the unit.
"""
import math
import re

from creditdesk.config import (
    CURRENCY_SYMBOL, THOUSANDS_SEPARATOR, DEFAULT_FORM_TERM_MONTHS
)


def round_half_up(value) -> int:
    """Round to the nearest whole unit, ties toward +infinity.

    Unlike round(), which rounds ties to even: 2.5 -> 3, -0.5 -> 0.
    """
    return int(math.floor(float(value) + 0.5))


def unformat_number(value) -> str:
    """Keep only the digits: "12.345" -> "12345". None -> ""."""
    if value is None:
        return ""
    return re.sub(r"\D+", "", str(value))


def format_thousands(digits_only: str) -> str:
    """Group digits by thousands: "12345" -> "12.345"."""
    return re.sub(r"\B(?=(\d{3})+(?!\d))", THOUSANDS_SEPARATOR, digits_only)


def to_number_safe(value) -> int:
    """Parse a formatted peso string into an int, 0 when nothing is left."""
    raw = unformat_number(value)
    return int(raw) if raw else 0


def normalize_term(value, fallback: int = DEFAULT_FORM_TERM_MONTHS) -> int:
    """Return value as a positive number of months, or fallback."""
    try:
        months = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isfinite(months) and months > 0:
        return int(months)
    return fallback


def format_cop(value) -> str:
    """Format an amount as COP without decimals: 1234567 -> "$ 1.234.567"."""
    amount = round_half_up(value or 0)
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL} {format_thousands(str(abs(amount)))}"


def format_percent(rate: float) -> str:
    """Format a rate as a percentage with two decimals: 0.0196 -> "1.96%"."""
    return f"{(rate or 0) * 100:.2f}%"
