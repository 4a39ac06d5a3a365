"""Normalization of numeric-like values found in upstream payloads."""

import math
import re
from typing import Any, Optional

_DECIMAL_RE = re.compile(r"^-?\d+(\.\d+)?$")
_DECORATION_RE = re.compile(r"[$%,\s]")

# Raw APY values at or below this are read as fractions (0.05 -> 5%)
FRACTION_CUTOFF = 1.5


def finite_number(value: Any) -> Optional[float]:
    """Return a native int or float as a finite float, else None.

    Strings are not accepted; integers too large for a float give None.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def parse_number(value: Any) -> Optional[float]:
    """Parse a number, or a string such as "$1,234.50" or "3.2%".

    Args:
        value: Any value from a decoded payload.

    Returns:
        A finite float, or None when the value is not a plain number.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return finite_number(value)

    if not isinstance(value, str):
        return None

    cleaned = _DECORATION_RE.sub("", value)
    if not cleaned or not _DECIMAL_RE.match(cleaned):
        return None

    number = float(cleaned)
    return number if math.isfinite(number) else None


def as_pct(value: Any) -> float:
    """Convert an APY that may be a fraction or a percentage to a percentage.

    Values up to FRACTION_CUTOFF are multiplied by 100. APYs between 1.0%
    and 1.5% are indistinguishable from fractions and come out inflated.

    Args:
        value: Raw APY value.

    Returns:
        APY as a percentage, 0.0 when the value is not a number.
    """
    number = parse_number(value)
    if number is None:
        return 0.0
    return number * 100 if number <= FRACTION_CUTOFF else number
