import math
from typing import Any, Optional


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return min(upper, max(lower, value))


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positives (2.5 -> 3), unlike built-in round()."""
    return int(math.floor(value + 0.5))


def to_finite_float(value: Any) -> Optional[float]:
    """
    Coerces a raw answer to a finite float.

    Numbers and numeric strings are accepted. Booleans, empty strings,
    NaN/inf, integers too large for a float and anything else unparsable
    return None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number
