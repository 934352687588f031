"""Shared numeric/formatting utilities for reporting."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

DEFAULT_DECIMALS = 2
TIE_PRECISION = 6


def round_half_up(value: float, decimals: int = DEFAULT_DECIMALS) -> float:
    """Round half-up, the same way the aggregation expressions do."""
    settled = Decimal(str(round(value, decimals + TIE_PRECISION)))
    return float(settled.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP))


def safe_ratio(num: float, den: float) -> float:
    if den <= 0:
        return 0.0
    return num / den


def fmt_number(value: float | None) -> str:
    if value is None:
        return "0"
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def fmt_pct(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.2f}%"
