"""Rise/set times of bodies frozen at a historic position.

Each body's position is taken at a historic date and place, then held fixed
while its altitude is sampled at the current place over the requested days.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List

from .altitude_sampler import sample_transitions
from .geo import GeoPos
from .oracle import BodyPosition, PositionOracle
from .transition_sets import TransitionSet


def historic_position(
    oracle: PositionOracle, jd_historic: float, key: str, geo_historic: GeoPos, topocentric: bool = False
) -> BodyPosition:
    with oracle.session(geo_historic if topocentric else None):
        pos = oracle.position(jd_historic, key, geo_historic, topocentric=topocentric)
    # Frozen in place: no motion across the sampled days
    return replace(pos, lng_speed=0.0, lat_speed=0.0)


def build_transposed_transition_sets(
    oracle: PositionOracle,
    jd_start: float,
    geo: GeoPos,
    pos: BodyPosition,
    key: str,
    days: int,
) -> List[TransitionSet]:
    sets: List[TransitionSet] = []
    for day in range(days):
        sampled = sample_transitions(oracle, jd_start + day, geo, pos, key, resample=False)
        sets.append(sampled.to_transition_set())
    return sets


def calc_transposed_transitions(
    oracle: PositionOracle,
    jd_start: float,
    geo: GeoPos,
    jd_historic: float,
    geo_historic: GeoPos,
    keys: Iterable[str],
    days: int = 1,
    topocentric: bool = False,
    iso: bool = False,
) -> List[Dict[str, Any]]:
    """Per key, the daily transitions of its historic position seen from ``geo``."""

    results: List[Dict[str, Any]] = []
    for key in keys:
        pos = historic_position(oracle, jd_historic, key, geo_historic, topocentric)
        sets = build_transposed_transition_sets(oracle, jd_start, geo, pos, key, days)
        results.append({"key": key, "items": [item.as_dict(iso) for item in sets]})
    return results


__all__ = ["build_transposed_transition_sets", "calc_transposed_transitions", "historic_position"]
