"""ESG compliance score.

Point accumulation over five numeric factors plus a capped certification
bonus. The same bands are applied by the browser client, so they must stay
in lockstep with it.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from app.utils.numbers import parse_float

# (threshold, points) bands checked in order; the last entry is the floor.
LOWER_IS_BETTER_BANDS: dict[str, tuple[Sequence[tuple[float, int]], int]] = {
    "carbonFootprint": (((100, 25), (200, 20), (300, 15), (500, 10)), 5),
    "waterUsage": (((50, 20), (100, 15), (200, 10), (500, 5)), 2),
    "wasteGenerated": (((10, 15), (25, 12), (50, 8), (100, 4)), 1),
}

HIGHER_IS_BETTER_BANDS: dict[str, tuple[Sequence[tuple[float, int]], int]] = {
    "renewableEnergy": (((80, 20), (60, 15), (40, 10), (20, 5)), 2),
    "laborCompliance": (((90, 20), (80, 15), (70, 10), (60, 5)), 2),
}

CERTIFICATION_POINTS: tuple[tuple[str, int], ...] = (
    ("iso 14001", 3),
    ("iso 9001", 2),
    ("fair trade", 2),
    ("organic", 2),
    ("fsc", 1),
)
CERTIFICATION_CAP = 10

ESG_INPUT_FIELDS: tuple[str, ...] = (
    "carbonFootprint",
    "waterUsage",
    "wasteGenerated",
    "renewableEnergy",
    "laborCompliance",
    "certifications",
)


def _lower_is_better(value: float, bands: Sequence[tuple[float, int]], floor: int) -> int:
    for threshold, points in bands:
        if value <= threshold:
            return points
    return floor


def _higher_is_better(value: float, bands: Sequence[tuple[float, int]], floor: int) -> int:
    for threshold, points in bands:
        if value >= threshold:
            return points
    return floor


def certification_bonus(certifications: Any) -> int:
    """Case-insensitive substring bonus, capped at ``CERTIFICATION_CAP``."""
    if not certifications:
        return 0
    text = str(certifications)
    if not text.strip():
        return 0
    lowered = text.lower()
    bonus = sum(points for needle, points in CERTIFICATION_POINTS if needle in lowered)
    return min(bonus, CERTIFICATION_CAP)


def calculate_esg_score(metrics: Mapping[str, Any]) -> int:
    """Score an ESG metrics record.

    A factor participates when its value is truthy, so ``0`` and ``""`` count
    as absent while ``"0"`` is present. The certification bonus is added
    regardless, but the result is forced to 0 when no numeric factor
    participated. The score is not clamped and can exceed 100.
    """
    score = 0
    total_factors = 0

    for field, (bands, floor) in LOWER_IS_BETTER_BANDS.items():
        raw = metrics.get(field)
        if raw:
            score += _lower_is_better(parse_float(raw), bands, floor)
            total_factors += 1

    for field, (bands, floor) in HIGHER_IS_BETTER_BANDS.items():
        raw = metrics.get(field)
        if raw:
            score += _higher_is_better(parse_float(raw), bands, floor)
            total_factors += 1

    score += certification_bonus(metrics.get("certifications"))

    if total_factors == 0:
        return 0
    # Half-up rounding.
    return int(math.floor(score + 0.5))
