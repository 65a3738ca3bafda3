"""Lunar phase boundaries from the Sun/Moon longitude separation.

A phase starts whenever the separation ``(moon - sun) mod 360`` crosses a
multiple of 90 degrees: 0 (new moon, phase 1), 90 (first quarter, phase 2),
180 (full moon, phase 3) and 270 (last quarter, phase 4).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .angles import calc_sun_moon_angle, signed_delta
from .dates import jd_to_iso
from .geo import GeoPos
from .oracle import PositionOracle

logger = logging.getLogger(__name__)

MEDIAN_LUNAR_MONTH = 29.53059
QUARTER_MONTH = MEDIAN_LUNAR_MONTH / 4.0

ANGLE_TOLERANCE = 0.005
MAX_ITERATIONS = 500
INITIAL_INCREMENT = 1.0 / 12.0

# (remainder below, step in days); at 4 degrees and above the step is kept
_INCREMENTS: Tuple[Tuple[float, float], ...] = (
    (0.0078125, 1.0 / 15360.0),
    (0.015625, 1.0 / 3840.0),
    (0.03125, 1.0 / 3840.0),
    (0.0625, 1.0 / 1920.0),
    (0.125, 1.0 / 960.0),
    (0.25, 1.0 / 480.0),
    (0.5, 1.0 / 240.0),
    (1.0, 1.0 / 96.0),
    (2.0, 1.0 / 48.0),
    (4.0, 1.0 / 24.0),
)


@dataclass(frozen=True)
class MoonPhase:
    jd: float
    angle: float
    num: int
    waxing: bool
    days: Optional[float] = None
    iterations: int = 0

    @property
    def target_angle(self) -> float:
        return boundary_angle(self.num)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "jd": self.jd,
            "utc": jd_to_iso(self.jd),
            "angle": self.angle,
            "num": self.num,
            "waxing": self.waxing,
        }
        if self.days is not None:
            data["days"] = self.days
        return data


def boundary_angle(num: int) -> float:
    """Separation at which phase ``num`` begins (360 for the new moon)."""

    return (num - 1) * 90.0 if num > 1 else 360.0


def remaining_angle(angle: float, target: float) -> float:
    """Signed degrees left to ``target``; negative once it has been passed."""

    return -signed_delta(angle, target)


def adjusted_micro_increment(remainder: float, increment: float) -> float:
    for limit, step in _INCREMENTS:
        if remainder < limit:
            return step
    return increment


def calc_sun_moon_angle_and_phase(
    oracle: PositionOracle, jd: float, geo: GeoPos
) -> Tuple[float, bool, int]:
    with oracle.session(geo):
        sun = oracle.position(jd, "su", geo, topocentric=True)
        moon = oracle.position(jd, "mo", geo, topocentric=True)
    return calc_sun_moon_angle(moon.lng, sun.lng)


def build_moon_phase(
    jd: float, angle: float, num: int, prev_jd: Optional[float], iterations: int = 0
) -> MoonPhase:
    target = boundary_angle(num)
    remainder = remaining_angle(angle, target)
    extra_jd = remainder / 90.0 * QUARTER_MONTH
    if abs(extra_jd) < 0.0005:
        jd += extra_jd
    if abs(remainder) <= 0.05:
        angle = target % 360.0
    days = jd - prev_jd if prev_jd is not None else None
    return MoonPhase(jd=jd, angle=angle, num=num, waxing=num <= 2, days=days, iterations=iterations)


def calc_next_phase(
    oracle: PositionOracle,
    start_jd: float,
    geo: GeoPos,
    num: int,
    prev_jd: Optional[float] = None,
) -> MoonPhase:
    """Walk from ``start_jd`` to the instant phase ``num`` begins."""

    target = boundary_angle(num)
    increment = INITIAL_INCREMENT
    jd = start_jd
    angle = 0.0
    iterations = 0
    while iterations < MAX_ITERATIONS:
        angle, _waxing, _phase = calc_sun_moon_angle_and_phase(oracle, jd, geo)
        iterations += 1
        remainder = remaining_angle(angle, target)
        if abs(remainder) < ANGLE_TOLERANCE:
            break
        increment = adjusted_micro_increment(abs(remainder), increment)
        jd += increment if remainder > 0.0 else -increment
    else:
        logger.warning(
            "moon_phase_search_exhausted",
            extra={"start_jd": start_jd, "num": num, "angle": angle},
        )
    return build_moon_phase(jd, angle, num, prev_jd, iterations)


def next_phase_num(num: int) -> int:
    return num + 1 if num < 4 else 1


def calc_moon_phases(oracle: PositionOracle, jd: float, geo: GeoPos, cycles: int = 1) -> List[MoonPhase]:
    """Return the next phase boundary after ``jd`` and ``3 + 4 * (cycles - 1)`` following ones."""

    current_angle, _waxing, phase = calc_sun_moon_angle_and_phase(oracle, jd, geo)
    distance = phase * 90.0 - current_angle
    start_jd = jd + QUARTER_MONTH * (distance / 90.0)
    num = next_phase_num(phase)
    phases = [calc_next_phase(oracle, start_jd, geo, num)]

    num_extra_phases = 3 + (max(cycles, 1) - 1) * 4
    for _ in range(num_extra_phases):
        prev = phases[-1]
        num = next_phase_num(prev.num)
        phases.append(calc_next_phase(oracle, prev.jd + QUARTER_MONTH, geo, num, prev.jd))
    return phases


__all__ = [
    "MEDIAN_LUNAR_MONTH",
    "MoonPhase",
    "adjusted_micro_increment",
    "calc_moon_phases",
    "calc_next_phase",
    "calc_sun_moon_angle_and_phase",
    "remaining_angle",
]
