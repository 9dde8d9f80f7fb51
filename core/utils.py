from __future__ import annotations

import math


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def is_finite_number(value) -> bool:
    """True for real, finite numbers. Booleans do not count."""
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def format_currency(value: float) -> str:
    """Compact dollar label: $4.8M, $470K, $950."""
    sign = "-" if value < 0 else ""
    v = abs(value)
    if v >= 1_000_000:
        return f"{sign}${v / 1_000_000:.1f}M"
    if v >= 1_000:
        return f"{sign}${v / 1_000:.0f}K"
    return f"{sign}${v:.0f}"


def format_percent(fraction: float) -> str:
    return f"{fraction * 100:.0f}%"
