"""Season-aware day offsets for searching rise/set links near the poles.

Inside the polar circles a body may stay above or below the horizon for
months. Scanning day by day from the current date to the end of such a period
is wasteful, so the search starts a number of days ahead (or behind) that
grows with the distance to the next equinox and with latitude.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .dates import day_of_year

# Maximum number of days scanned for a missing rise or set
MAX_POLAR_DAY = 183

AUTUMN_EQUINOX_DAY = 266
SPRING_EQUINOX_DAY = AUTUMN_EQUINOX_DAY - MAX_POLAR_DAY

# Latitude where the light/dark period starts to grow beyond a day
POLAR_CIRCLE_LAT = 200.0 / 3.0

SEARCH_MARGIN_DAYS = 18


@dataclass(frozen=True)
class PolarSearchOffsets:
    next_offset: int
    prev_offset: int


def days_until(day: int, target: int, base: int) -> int:
    """Forward distance in days from ``day`` to the next ``target`` day of year."""

    if day < target:
        return target - day
    return target + base - day


def days_to_next_equinox(jd: float) -> int:
    day = day_of_year(jd)
    spring = days_until(day, SPRING_EQUINOX_DAY, 366)
    if spring < MAX_POLAR_DAY:
        return spring
    return min(spring, days_until(day, AUTUMN_EQUINOX_DAY, 365))


def logarithmic_progress_to_pole(lat: float) -> float:
    """Return 0 up to the polar circle, rising to 1 at the pole."""

    abs_lat = abs(lat)
    if abs_lat <= POLAR_CIRCLE_LAT:
        return 0.0
    return math.sqrt(1.0 - (90.0 - abs_lat) / (90.0 - POLAR_CIRCLE_LAT))


def min_progress_to_end_of_light_period(lat: float) -> float:
    return math.floor(logarithmic_progress_to_pole(lat) * 120.0) / MAX_POLAR_DAY


def polar_search_offsets(jd: float, lat: float) -> PolarSearchOffsets:
    """Days to skip before scanning forward (next) or backward (prev)."""

    equinox_days = days_to_next_equinox(jd)
    min_progress = min_progress_to_end_of_light_period(lat)
    next_offset = math.floor(equinox_days * min_progress) - SEARCH_MARGIN_DAYS
    prev_offset = math.floor((MAX_POLAR_DAY - equinox_days) * min_progress) - SEARCH_MARGIN_DAYS
    return PolarSearchOffsets(max(0, next_offset), max(0, prev_offset))


__all__ = [
    "MAX_POLAR_DAY",
    "PolarSearchOffsets",
    "days_to_next_equinox",
    "days_until",
    "logarithmic_progress_to_pole",
    "min_progress_to_end_of_light_period",
    "polar_search_offsets",
]
