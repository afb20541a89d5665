"""Lenient numeric parsing for form-submitted values."""

from __future__ import annotations

import math
import re
from typing import Any

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_float(value: Any) -> float:
    """Parse the leading numeric prefix of ``value``.

    ``"90"`` and ``"90 tCO2e"`` both give ``90.0``. Anything without a numeric
    prefix gives NaN, which compares false against every threshold.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return math.nan
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return math.nan
    return float(match.group(0))


def parse_amount(value: Any) -> float:
    """Parse a monetary amount, treating missing or malformed values as zero."""
    amount = parse_float(value)
    if math.isnan(amount):
        return 0.0
    return amount


def is_valid_amount(value: Any) -> bool:
    """A finite, non-negative number or a string that fully parses as one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return False
    else:
        return False
    return math.isfinite(number) and number >= 0
