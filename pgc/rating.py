"""Skill-estimate to PGC rating conversion."""

import math
from typing import Optional

RATING_MIN = 0.0
RATING_MAX = 150.0

# Breakpoints on the external skill-estimate scale
LOW_BREAK = -1.5
HIGH_BREAK = 2.0

# Rating at each breakpoint
LOW_RATING = 5.0
HIGH_RATING = 100.0

DEFAULT_SKILL_ESTIMATE = -1.875


def normalize_skill_estimate(
    skill_estimate: Optional[float],
    default: float = DEFAULT_SKILL_ESTIMATE,
) -> float:
    """
    Map a continuous skill estimate onto the 0-150 rating scale.

    Scale:
        - Below -1.5: linear onto 0-5
        - -1.5 to 2: linear onto 5-100
        - Above 2: 100 + 20 * sqrt((x - 2) / 1.5), capped at 150

    Args:
        skill_estimate: Strokes-gained style estimate (None uses ``default``)
        default: Fallback estimate for golfers without one

    Returns:
        Rating rounded to 2 decimals; 0 for NaN or infinite input
    """
    x = default if skill_estimate is None else skill_estimate

    try:
        x = float(x)
    except (TypeError, ValueError):
        return RATING_MIN
    if not math.isfinite(x):
        return RATING_MIN

    if x < LOW_BREAK:
        raw = LOW_RATING + ((x - LOW_BREAK) / 1.5) * LOW_RATING
        return max(RATING_MIN, min(LOW_RATING, round(raw, 2)))

    if x <= HIGH_BREAK:
        span = HIGH_BREAK - LOW_BREAK
        raw = LOW_RATING + ((x - LOW_BREAK) / span) * (HIGH_RATING - LOW_RATING)
        return max(RATING_MIN, round(raw, 2))

    raw = HIGH_RATING + 20 * math.sqrt((x - HIGH_BREAK) / 1.5)
    return min(RATING_MAX, round(raw, 2))
