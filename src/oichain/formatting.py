"""Number parsing and formatting helpers for Indian market data.

Upstream exchange feeds send numbers as floats, ints, comma-grouped
strings ("1,234.50") or empty strings. Everything numeric passes
through parse_lenient_float before it reaches the canonical schema.

Display helpers follow Indian conventions: lakh (1e5) and crore (1e7)
suffixes, rupee currency.
"""

from __future__ import annotations

import math

LAKH = 100_000
CRORE = 10_000_000


def parse_lenient_float(raw, default: float | None = 0.0) -> float | None:
    """Parse a possibly-dirty numeric value.

    Strips thousands-separator commas and surrounding whitespace from
    strings. Never raises.

    Args:
        raw: String, int, float, None or anything else.
        default: Returned when the value is missing or unparseable.

    Returns:
        Parsed float, or ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else default
    if not isinstance(raw, str):
        return default

    cleaned = raw.replace(",", "").strip()
    if not cleaned:
        return default
    try:
        value = float(cleaned)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


def scale_to_human_unit(value: float) -> str:
    """Format a large number with crore/lakh suffixes.

    >>> scale_to_human_unit(12345678)
    '1.23Cr'
    >>> scale_to_human_unit(-150000)
    '-1.50L'
    >>> scale_to_human_unit(4321)
    '4,321'
    """
    sign = "-" if value < 0 else ""
    magnitude = abs(value)

    if magnitude >= CRORE:
        return f"{sign}{magnitude / CRORE:.2f}Cr"
    if magnitude >= LAKH:
        return f"{sign}{magnitude / LAKH:.2f}L"

    rounded = round(magnitude)
    if rounded == 0:
        return "0"
    return f"{sign}{rounded:,}"


def format_signed_percent(value: float) -> dict:
    """Format a percentage change with an explicit sign.

    Returns:
        Dict with ``text`` (e.g. "+1.25") and ``sign`` ("positive",
        "negative" or "zero").
    """
    value = parse_lenient_float(value, 0.0) or 0.0  # folds -0.0
    text = f"+{value:.2f}" if value >= 0 else f"{value:.2f}"

    if value > 0:
        sign = "positive"
    elif value < 0:
        sign = "negative"
    else:
        sign = "zero"
    return {"text": text, "sign": sign}


def format_currency(value: float) -> str:
    """Format as rupees with two decimals."""
    return f"₹{parse_lenient_float(value, 0.0):.2f}"


def format_lakhs(value: float) -> float:
    """Convert a raw count to lakhs (for chart axes)."""
    return value / LAKH
