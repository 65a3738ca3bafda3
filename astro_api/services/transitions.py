"""Rise, set and meridian transits for one body on one local day.

Away from the poles the Swiss Ephemeris rise/transit primitives are reliable
and fast. At ``|lat| >= 60`` bodies may skim the horizon or stay up or down
for days, so the altitude curve is sampled instead and, for the extended
variant, neighbouring rise/set instants are searched day by day.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from .altitude_sampler import SampledTransitions, sample_transitions
from .dates import MIN_JD, start_jd_geo
from .geo import GeoPos
from .oracle import PositionOracle, TransitEvent, TransitionMode, calc_altitude_object
from .seasons import MAX_POLAR_DAY, polar_search_offsets
from .transition_sets import AltTransitionSet, ExtendedTransitionSet, TransitionSet

logger = logging.getLogger(__name__)

POLAR_LATITUDE = 60.0

DEFAULT_MODE = TransitionMode.CENTER_DISC_NO_REFRACTION


def is_near_poles(lat: float) -> bool:
    return lat >= POLAR_LATITUDE or lat <= -POLAR_LATITUDE


# Native primitives


def next_rise(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> float:
    return oracle.rise_trans(jd, key, geo.lat, geo.lng, TransitEvent.RISE, mode)


def next_set(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> float:
    return oracle.rise_trans(jd, key, geo.lat, geo.lng, TransitEvent.SET, mode)


def next_mc(oracle: PositionOracle, jd: float, key: str, geo: GeoPos) -> float:
    return oracle.rise_trans(jd, key, geo.lat, geo.lng, TransitEvent.MC, TransitionMode.NO_REFRACTION)


def next_ic(oracle: PositionOracle, jd: float, key: str, geo: GeoPos) -> float:
    return oracle.rise_trans(jd, key, geo.lat, geo.lng, TransitEvent.IC, TransitionMode.NO_REFRACTION)


def next_mc_normal(oracle: PositionOracle, jd: float, key: str, geo: GeoPos) -> float:
    """Upper transit, or the midpoint of rise and the following set if the primitive fails."""

    value = next_mc(oracle, jd, key, geo)
    if value >= 1.0:
        return value
    logger.debug("mc_fallback", extra={"key": key, "jd": jd})
    rise = next_rise(oracle, jd, key, geo, TransitionMode.FIXED_DISC)
    set_ = next_set(oracle, rise, key, geo, TransitionMode.FIXED_DISC)
    return (set_ + rise) / 2.0


def next_ic_normal(oracle: PositionOracle, jd: float, key: str, geo: GeoPos) -> float:
    """Lower transit, or the midpoint of set and the following rise if the primitive fails."""

    value = next_ic(oracle, jd, key, geo)
    if value >= 1.0:
        return value
    logger.debug("ic_fallback", extra={"key": key, "jd": jd})
    set_ = next_set(oracle, jd, key, geo, TransitionMode.FIXED_DISC)
    rise = next_rise(oracle, set_, key, geo, TransitionMode.FIXED_DISC)
    return (rise + set_) / 2.0


# Altitude sampling


def sample_day(oracle: PositionOracle, ref_jd: float, key: str, geo: GeoPos) -> SampledTransitions:
    with oracle.session(geo):
        pos = oracle.position(ref_jd, key, geo, topocentric=True)
        return sample_transitions(oracle, ref_jd, geo, pos, key)


def calc_transition_set_altitude(
    oracle: PositionOracle, ref_jd: float, key: str, geo: GeoPos
) -> TransitionSet:
    return sample_day(oracle, ref_jd, key, geo).to_transition_set()


def calc_transition_set_minmax(
    oracle: PositionOracle, ref_jd: float, key: str, geo: GeoPos
) -> AltTransitionSet:
    return sample_day(oracle, ref_jd, key, geo).to_alt_transition_set()


# Fast path


def calc_transition_set_fast(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> TransitionSet:
    ref_jd = start_jd_geo(jd, geo.lng)
    rise = next_rise(oracle, ref_jd, key, geo, mode)
    set_ = next_set(oracle, rise, key, geo, mode) if rise > 0.0 else next_set(oracle, ref_jd, key, geo, mode)
    mc = next_mc_normal(oracle, ref_jd, key, geo)
    ic = next_ic_normal(oracle, mc, key, geo)
    return TransitionSet(rise=rise, mc=mc, set=set_, ic=ic)


def calc_transition_set_alt_fast(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> AltTransitionSet:
    ref_jd = start_jd_geo(jd, geo.lng)
    rise = next_rise(oracle, ref_jd, key, geo, mode)
    set_ = next_set(oracle, ref_jd, key, geo, mode)
    mc = next_mc_normal(oracle, ref_jd, key, geo)
    ic = next_ic_normal(oracle, ref_jd, key, geo)
    with oracle.session(geo):
        min_alt = calc_altitude_object(oracle, ic, geo, key)
        max_alt = calc_altitude_object(oracle, mc, geo, key)
    return AltTransitionSet(min=min_alt, rise=rise, mc=mc, set=set_, ic=ic, max=max_alt)


def calc_transition_set_extended_fast(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> ExtendedTransitionSet:
    ref_jd = start_jd_geo(jd, geo.lng)
    prev_set = next_set(oracle, ref_jd - 1.0, key, geo, mode)
    rise = next_rise(oracle, ref_jd, key, geo, mode)
    set_ = next_set(oracle, ref_jd, key, geo, mode)
    mc = next_mc_normal(oracle, ref_jd, key, geo)
    ic = next_ic_normal(oracle, ref_jd, key, geo)
    following_rise = next_rise(oracle, set_, key, geo, mode) if set_ > 0.0 else 0.0
    with oracle.session(geo):
        min_alt = calc_altitude_object(oracle, ic, geo, key)
        max_alt = calc_altitude_object(oracle, mc, geo, key)
    return ExtendedTransitionSet(
        prev_set=prev_set,
        rise=rise,
        mc=mc,
        set=set_,
        ic=ic,
        next_rise=following_rise,
        min=min_alt,
        max=max_alt,
    )


# Polar path


def calc_next_set_or_prev_rise_jd(
    oracle: PositionOracle, ref_jd: float, geo: GeoPos, key: str, forward: bool
) -> float:
    """Search for the set ending (``forward``) or the rise starting an up period."""

    offsets = polar_search_offsets(ref_jd, geo.lat)
    counter = offsets.next_offset if forward else offsets.prev_offset
    while counter < MAX_POLAR_DAY:
        sample_jd = ref_jd + counter if forward else ref_jd - counter
        sample = calc_transition_set_altitude(oracle, sample_jd, key, geo)
        target = sample.set if forward else sample.rise
        if target >= MIN_JD:
            return target
        counter += 1
    logger.info(
        "polar_search_exhausted",
        extra={"key": key, "jd": ref_jd, "lat": geo.lat, "forward": forward},
    )
    return 0.0


def calc_transition_set_extended_azalt(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, get_prev_next: bool = True
) -> ExtendedTransitionSet:
    ref_jd = start_jd_geo(jd, geo.lng)
    base = calc_transition_set_minmax(oracle, ref_jd, key, geo)
    prev_set = 0.0
    following_rise = 0.0
    if get_prev_next:
        prev_set = calc_transition_set_altitude(oracle, ref_jd - 1.0, key, geo).set
        following_rise = calc_transition_set_altitude(oracle, ref_jd + 1.0, key, geo).rise

    if get_prev_next and (following_rise < MIN_JD or prev_set < MIN_JD):
        offsets = polar_search_offsets(ref_jd, geo.lat)
        counter = offsets.next_offset
        while following_rise < MIN_JD and counter < MAX_POLAR_DAY:
            nx = calc_transition_set_altitude(oracle, ref_jd + counter, key, geo)
            if nx.rise >= MIN_JD and (offsets.prev_offset < 1 or nx.rise > base.rise):
                following_rise = nx.rise
            counter += 1
        counter = offsets.prev_offset
        while prev_set < MIN_JD and counter < MAX_POLAR_DAY:
            pv = calc_transition_set_altitude(oracle, ref_jd - counter, key, geo)
            if pv.set >= MIN_JD:
                prev_set = pv.set
            counter += 1

    return ExtendedTransitionSet(
        prev_set=prev_set,
        rise=base.rise,
        mc=base.mc,
        set=base.set,
        ic=base.ic,
        next_rise=following_rise,
        min=base.min,
        max=base.max,
    )


# Dispatch


def calc_transition_set(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> TransitionSet:
    if is_near_poles(geo.lat):
        return calc_transition_set_altitude(oracle, start_jd_geo(jd, geo.lng), key, geo)
    return calc_transition_set_fast(oracle, jd, key, geo, mode)


def calc_transition_set_alt(
    oracle: PositionOracle, jd: float, key: str, geo: GeoPos, mode: TransitionMode = DEFAULT_MODE
) -> AltTransitionSet:
    if is_near_poles(geo.lat):
        return calc_transition_set_minmax(oracle, start_jd_geo(jd, geo.lng), key, geo)
    return calc_transition_set_alt_fast(oracle, jd, key, geo, mode)


def calc_transition_set_extended(
    oracle: PositionOracle,
    jd: float,
    key: str,
    geo: GeoPos,
    get_prev_next: bool = True,
    mode: TransitionMode = DEFAULT_MODE,
) -> ExtendedTransitionSet:
    if is_near_poles(geo.lat):
        return calc_transition_set_extended_azalt(oracle, jd, key, geo, get_prev_next)
    return calc_transition_set_extended_fast(oracle, jd, key, geo, mode)


# Multi-body helpers


def get_transition_sets(
    oracle: PositionOracle,
    jd: float,
    keys: Iterable[str],
    geo: GeoPos,
    mode: TransitionMode = DEFAULT_MODE,
    iso: bool = False,
) -> List[Dict[str, Any]]:
    """One record per body: extended for the Sun and Moon, basic otherwise."""

    results: List[Dict[str, Any]] = []
    for key in keys:
        if key in ("su", "mo"):
            record = calc_transition_set_extended(oracle, jd, key, geo, True, mode)
        else:
            record = calc_transition_set(oracle, jd, key, geo, mode)
        results.append({"key": key, "items": record.as_dict(iso)})
    return results


def get_transition_sets_extended(
    oracle: PositionOracle,
    jd: float,
    keys: Iterable[str],
    geo: GeoPos,
    days: int = 1,
    mode: TransitionMode = DEFAULT_MODE,
    iso: bool = False,
) -> List[Dict[str, Any]]:
    """Daily :class:`AltTransitionSet` records per body over ``days`` days."""

    results: List[Dict[str, Any]] = []
    for key in keys:
        if len(key) != 2:
            continue
        items = [
            calc_transition_set_alt(oracle, jd + day, key, geo, mode).as_dict(iso)
            for day in range(days)
        ]
        results.append({"key": key, "items": items})
    return results


__all__ = [
    "DEFAULT_MODE",
    "calc_next_set_or_prev_rise_jd",
    "calc_transition_set",
    "calc_transition_set_alt",
    "calc_transition_set_extended",
    "get_transition_sets",
    "get_transition_sets_extended",
    "is_near_poles",
    "next_ic_normal",
    "next_mc_normal",
    "next_rise",
    "next_set",
]
