"""Math helpers — range mapping, clamping, 2-decimal rounding. No engine imports."""

from __future__ import annotations

import math


def map_range(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly map value from [in_min, in_max] onto [out_min, out_max]."""
    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def lerp(t: float, lo: float, hi: float) -> float:
    """t=0 → lo, t=1 → hi."""
    return map_range(t, 0.0, 1.0, lo, hi)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round2(value: float) -> float:
    """Round to 2 decimals. Normalizes -0.0 to 0.0."""
    rounded = round(value, 2)
    return rounded + 0.0


def is_finite_number(value: object) -> bool:
    """True for real, finite int/float values (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
