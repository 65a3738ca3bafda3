"""Sharpen a coarse altitude maximum (MC) or minimum (IC).

The sampler reads the altitude every few minutes, so its best sample may be
several minutes away from the true extremum. The refiner rescans a window of
``2.25 * cadence`` minutes centred on that sample at one-second resolution.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Tuple

from .geo import GeoPos
from .oracle import PositionOracle, calc_altitude
from .transition_sets import AltitudeSample

MINS_PER_DAY = 1440.0

# One second expressed in minutes
SUB_SAMPLE_RATE = 1.0 / 60.0

WINDOW_FACTOR = 2.25


def refine_extremum(
    oracle: PositionOracle,
    sample: AltitudeSample,
    geo: GeoPos,
    coords: Tuple[float, float],
    max_mode: bool,
    cadence: int = 5,
) -> AltitudeSample:
    """Return the sharpest sample near ``sample``.

    Parameters
    ----------
    coords:
        Ecliptic ``(lng, lat)`` of the body at the coarse sample; held fixed
        across the window.
    max_mode:
        ``True`` to refine an MC (maximum), ``False`` for an IC (minimum).
    """

    lng, lat = coords
    mode = "mc" if max_mode else "ic"
    num_sub_samples = cadence * WINDOW_FACTOR / SUB_SAMPLE_RATE
    half_window_mins = num_sub_samples / (2.0 / SUB_SAMPLE_RATE)
    start_jd = sample.jd - half_window_mins / MINS_PER_DAY
    start_min = sample.mins - half_window_mins

    best = replace(sample, mode=mode)
    for i in range(int(num_sub_samples) + cadence):
        offset_mins = i * SUB_SAMPLE_RATE
        jd = start_jd + offset_mins / MINS_PER_DAY
        value = calc_altitude(oracle, jd, geo, lng, lat)
        if (max_mode and value > best.value) or (not max_mode and value < best.value):
            best = AltitudeSample(mode, start_min + offset_mins, jd, value)
    return best


__all__ = ["refine_extremum"]
