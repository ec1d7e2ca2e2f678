"""Travel time bucket classification."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any

TRAVEL_TIME_BUCKETS: tuple[str, ...] = (
    "0-15 min",
    "15-30 min",
    "30-45 min",
    "45-60 min",
    "60-75 min",
    "75-90 min",
    "> 90 min",
)

# Inclusive upper bounds in minutes, aligned with TRAVEL_TIME_BUCKETS.
_BUCKET_UPPER_BOUNDS = (15, 30, 45, 60, 75, 90)


def is_finite_number(value: Any) -> bool:
    """True for finite int/float values. Booleans are not numbers here."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def classify_travel_time(seconds: Any) -> str | None:
    if not is_finite_number(seconds):
        return None
    minutes = seconds / 60

    for upper, label in zip(_BUCKET_UPPER_BOUNDS, TRAVEL_TIME_BUCKETS):
        if minutes <= upper:
            return label
    return TRAVEL_TIME_BUCKETS[-1]
