"""Day-by-day rise/set scan that carries links across polar days and nights.

When a body stays up (or down) all day there is no rise or set to report.
The scan keeps the last real rise and set it has seen, plus the next ones it
has found, and attaches them to every up or down day so each record points
to the events bounding its period.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .dates import MIN_JD, jd_to_iso
from .geo import GeoPos
from .oracle import PositionOracle, TransitionMode
from .transition_sets import ExtendedTransitionSet
from .transitions import (
    DEFAULT_MODE,
    calc_next_set_or_prev_rise_jd,
    calc_transition_set_alt,
    calc_transition_set_extended,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CarryState:
    prev_set_jd: float = 0.0
    next_rise_jd: float = 0.0
    prev_rise_jd: float = 0.0
    next_set_jd: float = 0.0
    get_prev_next: bool = True


def step(
    oracle: PositionOracle,
    state: CarryState,
    jd: float,
    geo: GeoPos,
    key: str = "su",
    mode: TransitionMode = DEFAULT_MODE,
) -> Tuple[CarryState, ExtendedTransitionSet]:
    """Compute one day and return the updated carry state with the linked record."""

    row = calc_transition_set_extended(oracle, jd, key, geo, state.get_prev_next, mode)
    prev_set_jd = state.prev_set_jd
    next_rise_jd = state.next_rise_jd
    prev_rise_jd = state.prev_rise_jd
    next_set_jd = state.next_set_jd
    get_prev_next = state.get_prev_next

    if row.next_rise > 0.0:
        next_rise_jd = row.next_rise
    if row.set > 0.0:
        prev_set_jd = row.set
    elif row.prev_set > MIN_JD:
        prev_set_jd = row.prev_set
    if row.rise > 0.0:
        prev_rise_jd = row.rise

    if row.is_down():
        get_prev_next = False
        row = row.with_links(prev_set_jd, next_rise_jd)
    elif row.is_up():
        get_prev_next = False
        if prev_rise_jd < MIN_JD:
            prev_rise_jd = calc_next_set_or_prev_rise_jd(oracle, jd, geo, key, forward=False)
        if next_set_jd < MIN_JD:
            next_set_jd = calc_next_set_or_prev_rise_jd(oracle, jd, geo, key, forward=True)
        row = row.with_links(prev_rise_jd, next_set_jd)
    elif row.needs_rise():
        # left as is: no rise is invented between two sets
        logger.debug("rise_missing_between_sets", extra={"key": key, "jd": jd, "set": row.set})

    if row.set > MIN_JD or row.rise > MIN_JD:
        get_prev_next = True
    if row.set > MIN_JD:
        next_set_jd = 0.0

    new_state = CarryState(
        prev_set_jd=prev_set_jd,
        next_rise_jd=next_rise_jd,
        prev_rise_jd=prev_rise_jd,
        next_set_jd=next_set_jd,
        get_prev_next=get_prev_next,
    )
    return new_state, row


def calc_transition_sets(
    oracle: PositionOracle,
    jd: float,
    days: int,
    geo: GeoPos,
    key: str = "su",
    mode: TransitionMode = DEFAULT_MODE,
) -> Tuple[ExtendedTransitionSet, ...]:
    """Fold :func:`step` over ``days`` consecutive days starting at ``jd``."""

    state = CarryState()
    rows: List[ExtendedTransitionSet] = []
    for day in range(days):
        state, row = step(oracle, state, jd + day, geo, key, mode)
        rows.append(row)
    logger.debug(
        "transition_sets_scanned",
        extra={"key": key, "days": days, "lat": geo.lat, "up_days": sum(r.is_up() for r in rows)},
    )
    return tuple(rows)


def calc_transitions_sun(
    oracle: PositionOracle,
    jd: float,
    days: int,
    geo: GeoPos,
    mode: TransitionMode = DEFAULT_MODE,
    iso: bool = False,
) -> List[Dict[str, Any]]:
    """Flat key/value listing of daily Sun events, dropping absent ones."""

    items: List[Dict[str, Any]] = []
    for day in range(days):
        record = calc_transition_set_alt(oracle, jd + day, "su", geo, mode)
        for key, value in record.as_dict().items():
            if value == 0.0:
                continue
            if iso and key not in ("min", "max"):
                value = jd_to_iso(value)
            items.append({"key": key, "value": value})
    return items


__all__ = ["CarryState", "calc_transition_sets", "calc_transitions_sun", "step"]
