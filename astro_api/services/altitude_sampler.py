"""Altitude-curve sampling for rise, set and transit detection near the poles.

The body's altitude is read every ``cadence`` minutes across one day. Sign
changes of the altitude (shifted by the disc semi-diameter for the Sun and
Moon) bracket rise and set, which are then linearly interpolated. The running
maximum and minimum are handed to :func:`refine_extremum` to locate MC and IC.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .extremum_refiner import MINS_PER_DAY, refine_extremum
from .geo import GeoPos
from .oracle import BodyPosition, PositionOracle, calc_altitude
from .transition_sets import (
    UP_DOWN_TOLERANCE,
    AltitudeSample,
    AltTransitionSet,
    TransitionSet,
)

logger = logging.getLogger(__name__)

DEFAULT_CADENCE = 5

DISC_KEYS = ("su", "mo")


@dataclass(frozen=True)
class SampledTransitions:
    rise: AltitudeSample
    set: AltitudeSample
    mc: AltitudeSample
    ic: AltitudeSample

    def to_transition_set(self) -> TransitionSet:
        return TransitionSet(rise=self.rise.jd, mc=self.mc.jd, set=self.set.jd, ic=self.ic.jd)

    def to_alt_transition_set(self) -> AltTransitionSet:
        return AltTransitionSet(
            min=self.ic.value,
            rise=self.rise.jd,
            mc=self.mc.jd,
            set=self.set.jd,
            ic=self.ic.jd,
            max=self.mc.value,
        )


def calc_mid_point(first: AltitudeSample, second: AltitudeSample) -> float:
    """Interpolate where the altitude reaches zero between two samples.

    Usually one value is negative and the other positive. Equal values give
    ``second.jd``.
    """

    value_diff = second.value - first.value
    if value_diff == 0.0:
        return second.jd
    progress = abs(second.value) / abs(value_diff)
    jd_diff = abs(second.jd - first.jd)
    return second.jd - jd_diff * progress


def calc_jd_from_min_max(mc: AltitudeSample, ic: AltitudeSample, set_mode: bool) -> float:
    """Approximate a crossing from the extrema when no sign change was sampled.

    The crossing sits between MC and IC in proportion to the MC's height
    above the horizon; after MC for a set, before it for a rise.
    """

    diff_alt = mc.value - ic.value
    progress = mc.value / diff_alt if diff_alt > 0.0 else 0.0
    rel_diff = abs(ic.jd - mc.jd)
    if not set_mode:
        rel_diff = -rel_diff
    return mc.jd + rel_diff * progress


def calc_jd_around_min(mc: AltitudeSample, ic: AltitudeSample, set_mode: bool) -> float:
    """Counterpart of :func:`calc_jd_from_min_max` for a brief dip below the horizon."""

    diff_alt = mc.value - ic.value
    progress = -ic.value / diff_alt if diff_alt > 0.0 else 0.0
    rel_diff = abs(mc.jd - ic.jd)
    if set_mode:
        rel_diff = -rel_diff
    return ic.jd + rel_diff * progress


def disc_semi_diameter(oracle: PositionOracle, jd: float, key: str) -> float:
    if key not in DISC_KEYS:
        return 0.0
    return oracle.phenomena(jd, key).apparent_diameter / 2.0


def _interpolated(mode: str, prev: AltitudeSample, item: AltitudeSample) -> AltitudeSample:
    return AltitudeSample(mode, prev.mins, calc_mid_point(prev, item), 0.0)


def sample_transitions(
    oracle: PositionOracle,
    jd_start: float,
    geo: GeoPos,
    pos: BodyPosition,
    key: str = "",
    cadence: int = DEFAULT_CADENCE,
    disc_offset: Optional[float] = None,
    resample: Optional[bool] = None,
) -> SampledTransitions:
    """Scan one day of altitudes starting at ``jd_start``.

    ``pos`` is the body's ecliptic position at ``jd_start``; it is projected
    forward with its longitude speed unless ``resample`` is set (default for
    the Moon), in which case the oracle is queried at every sample.
    """

    if disc_offset is None:
        disc_offset = disc_semi_diameter(oracle, jd_start, key)
    if resample is None:
        resample = key == "mo" and pos.lng_speed != 0.0

    num_samples = int(MINS_PER_DAY) // cadence + 1
    rise = AltitudeSample("rise")
    set_ = AltitudeSample("set")
    mc = AltitudeSample("mc", value=-90.0)
    ic = AltitudeSample("ic", value=90.0)
    mc_coords: Tuple[float, float] = (pos.lng, pos.lat)
    ic_coords: Tuple[float, float] = (pos.lng, pos.lat)
    obj_rises = False
    obj_sets = False
    prev: Optional[AltitudeSample] = None

    for i in range(num_samples):
        mins = float(i * cadence)
        day_frac = mins / MINS_PER_DAY
        jd = jd_start + day_frac
        if resample:
            current = oracle.position(jd, key, geo, topocentric=True)
            lng, lat = current.lng, current.lat
        else:
            lng = pos.lng + pos.lng_speed * day_frac
            lat = pos.lat
        value = calc_altitude(oracle, jd, geo, lng, lat)
        item = AltitudeSample("", mins, jd, value)

        if value > mc.value:
            mc = item.with_mode("mc")
            mc_coords = (lng, lat)
        if value < ic.value:
            ic = item.with_mode("ic")
            ic_coords = (lng, lat)

        if prev is not None:
            if prev.value + disc_offset < 0.0 < value + disc_offset:
                rise = _interpolated(
                    "rise",
                    replace(prev, value=prev.value + disc_offset),
                    replace(item, value=value + disc_offset),
                )
            elif prev.value - disc_offset > 0.0 > value - disc_offset:
                set_ = _interpolated(
                    "set",
                    replace(prev, value=prev.value - disc_offset),
                    replace(item, value=value - disc_offset),
                )
            if prev.value < 0.0 < value:
                obj_rises = True
            if prev.value > 0.0 > value:
                obj_sets = True
        prev = item

    last_mins = float((num_samples - 1) * cadence)
    for extremum in (mc, ic):
        # may be the day edge rather than a culmination
        if extremum.mins in (0.0, last_mins):
            logger.debug(
                "extremum_at_day_boundary",
                extra={"key": key, "mode": extremum.mode, "jd": extremum.jd, "value": extremum.value},
            )

    if mc.jd > 0.0:
        mc = refine_extremum(oracle, mc, geo, mc_coords, True, cadence)
    if ic.jd > 0.0:
        ic = refine_extremum(oracle, ic, geo, ic_coords, False, cadence)

    rise, set_ = _synthesize_crossings(rise, set_, mc, ic, obj_rises, obj_sets)
    return SampledTransitions(rise=rise, set=set_, mc=mc, ic=ic)


def _synthesize_crossings(
    rise: AltitudeSample,
    set_: AltitudeSample,
    mc: AltitudeSample,
    ic: AltitudeSample,
    obj_rises: bool,
    obj_sets: bool,
) -> Tuple[AltitudeSample, AltitudeSample]:
    """Fill in crossings the coarse scan missed near the horizon."""

    mc_skims = 0.0 <= mc.value < UP_DOWN_TOLERANCE
    ic_skims = -UP_DOWN_TOLERANCE < ic.value <= 0.0 and mc.value > 0.0

    if mc_skims and mc.jd > 0.0:
        if set_.jd <= 0.0 and (rise.jd > 0.0 or not obj_rises):
            set_ = AltitudeSample("set", mc.mins, calc_jd_from_min_max(mc, ic, True), 0.0)
        if rise.jd <= 0.0 and (set_.jd > 0.0 or not obj_sets):
            rise = AltitudeSample("rise", mc.mins, calc_jd_from_min_max(mc, ic, False), 0.0)
    elif ic_skims and ic.jd > 0.0 and rise.jd <= 0.0 and set_.jd <= 0.0:
        set_ = AltitudeSample("set", ic.mins, calc_jd_around_min(mc, ic, True), 0.0)
        rise = AltitudeSample("rise", ic.mins, calc_jd_around_min(mc, ic, False), 0.0)

    if mc.jd > 0.0:
        if set_.jd == 0.0 and rise.jd > 0.0:
            diff_mc = abs(mc.jd - rise.jd)
            if diff_mc < UP_DOWN_TOLERANCE and obj_sets:
                set_ = AltitudeSample("set", rise.mins, mc.jd + diff_mc, 0.0)
        elif rise.jd == 0.0 and set_.jd > 0.0:
            diff_mc = abs(set_.jd - mc.jd)
            if diff_mc < UP_DOWN_TOLERANCE and obj_rises:
                rise = AltitudeSample("rise", set_.mins, mc.jd - diff_mc, 0.0)

    if rise.jd == 0.0 or set_.jd == 0.0:
        logger.debug(
            "horizon_crossing_missing",
            extra={"mc": mc.value, "ic": ic.value, "rise": rise.jd, "set": set_.jd},
        )
    return rise, set_


__all__ = [
    "DEFAULT_CADENCE",
    "SampledTransitions",
    "calc_jd_from_min_max",
    "calc_mid_point",
    "disc_semi_diameter",
    "sample_transitions",
]
