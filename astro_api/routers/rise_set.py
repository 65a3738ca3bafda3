"""Rise/set, transit, phenomena and moon phase endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..schemas.rise_set import (
    MoonPhasesResponse,
    PhenoResponse,
    RiseSetResponse,
    RiseTransCheckResponse,
    SunRiseSetResponse,
    TransposedResponse,
)
from ..services.dates import jd_to_iso, resolve_date
from ..services.ephem import default_oracle
from ..services.geo import geo_or_zero
from ..services.lunar_phases import calc_moon_phases
from ..services.oracle import PositionOracle, TransitEvent, TransitionMode
from ..services.polar_tracker import calc_transition_sets, calc_transitions_sun
from ..services.transitions import get_transition_sets_extended
from ..services.transposed import calc_transposed_transitions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["rise-set"])

DEFAULT_BODY_KEYS = ["su", "mo", "ma", "me", "ju", "ve", "sa"]

MAX_DAYS = 366
MAX_CYCLES = 24


def get_oracle() -> PositionOracle:
    return default_oracle()


def parse_body_keys(bodies: Optional[str], default: Optional[List[str]] = None) -> List[str]:
    """Split a comma list into two-letter body keys, falling back to ``default``."""

    keys = [
        part.strip().lower()
        for part in (bodies or "").split(",")
        if len(part.strip()) == 2 and part.strip().lower() != "as"
    ]
    if keys:
        return keys
    return list(default if default is not None else DEFAULT_BODY_KEYS)


def _num_days(days: Optional[int], default: int) -> int:
    value = days if days is not None else default
    return min(max(value, 1), MAX_DAYS)


@router.get("/rise-set-times", response_model=RiseSetResponse)
def rise_set_times(
    dt: Optional[str] = Query(None, description="UTC date/time, ISO-8601 style"),
    jd: Optional[float] = Query(None, description="Julian day, used when > 1e6"),
    loc: Optional[str] = Query(None, description="lat,lng[,alt]"),
    bodies: Optional[str] = Query(None, description="Comma separated two-letter body keys"),
    days: Optional[int] = Query(None),
    iso: int = Query(0),
    mode: Optional[int] = Query(None, description="Rise/set convention 0-7"),
    oracle: PositionOracle = Depends(get_oracle),
):
    date = resolve_date(dt, jd)
    geo = geo_or_zero(loc)
    keys = parse_body_keys(bodies)
    sets = get_transition_sets_extended(
        oracle, date.jd, keys, geo, _num_days(days, 1), TransitionMode.from_value(mode), iso > 0
    )
    return {"valid": len(sets) > 0, "date": date.as_dict(), "geo": geo.as_dict(), "sets": sets}


@router.get(
    "/sun-rise-set-times",
    response_model=SunRiseSetResponse,
    response_model_exclude_none=True,
)
def sun_rise_set_times(
    dt: Optional[str] = Query(None),
    jd: Optional[float] = Query(None),
    loc: Optional[str] = Query(None),
    days: Optional[int] = Query(None),
    iso: int = Query(0),
    mode: Optional[int] = Query(None),
    full: int = Query(0, description="1 = linked daily records across polar days and nights"),
    oracle: PositionOracle = Depends(get_oracle),
):
    date = resolve_date(dt, jd)
    geo = geo_or_zero(loc)
    num_days = _num_days(days, 28)
    transition_mode = TransitionMode.from_value(mode)
    payload = {"date": date.as_dict(), "geo": geo.as_dict()}
    if full > 0:
        rows = calc_transition_sets(oracle, date.jd, num_days, geo, "su", transition_mode)
        sets = [row.as_dict(iso > 0) for row in rows]
        payload.update(valid=len(sets) > 0, sets=sets)
    else:
        items = calc_transitions_sun(oracle, date.jd, num_days, geo, transition_mode, iso > 0)
        payload.update(valid=len(items) > 0, items=items)
    return payload


@router.get("/transposed-rise-times", response_model=TransposedResponse)
def transposed_rise_times(
    dt: Optional[str] = Query(None, description="Current date"),
    jd: Optional[float] = Query(None),
    loc: Optional[str] = Query(None, description="Current place"),
    dt2: Optional[str] = Query(None, description="Historic date"),
    jd2: Optional[float] = Query(None),
    loc2: Optional[str] = Query(None, description="Historic place"),
    bodies: Optional[str] = Query(None),
    days: Optional[int] = Query(None),
    iso: int = Query(0),
    mode: Optional[int] = Query(None),
    ct: int = Query(0, description="1 = include current rise/set times"),
    topo: int = Query(0, description="1 = topocentric historic positions"),
    oracle: PositionOracle = Depends(get_oracle),
):
    current_date = resolve_date(dt, jd)
    historic_date = resolve_date(dt2, jd2)
    current_geo = geo_or_zero(loc)
    historic_geo = geo_or_zero(loc2)
    keys = parse_body_keys(bodies)
    num_days = _num_days(days, 1)
    transposed = calc_transposed_transitions(
        oracle,
        current_date.jd,
        current_geo,
        historic_date.jd,
        historic_geo,
        keys,
        num_days,
        topocentric=topo > 0,
        iso=iso > 0,
    )
    current = []
    if ct > 0:
        current = get_transition_sets_extended(
            oracle, current_date.jd, keys, current_geo, num_days, TransitionMode.from_value(mode), iso > 0
        )
    return {
        "valid": len(transposed) > 0,
        "date": current_date.as_dict(),
        "geo": current_geo.as_dict(),
        "historicDate": historic_date.as_dict(),
        "historicGeo": historic_geo.as_dict(),
        "days": num_days,
        "transposed": transposed,
        "current": current,
    }


@router.get("/pheno", response_model=PhenoResponse)
def pheno(
    dt: Optional[str] = Query(None),
    jd: Optional[float] = Query(None),
    bodies: Optional[str] = Query(None),
    oracle: PositionOracle = Depends(get_oracle),
):
    date = resolve_date(dt, jd)
    result = []
    for key in parse_body_keys(bodies):
        item = {"key": key}
        item.update(oracle.phenomena(date.jd, key).as_dict())
        result.append(item)
    return {"valid": len(result) > 0, "date": date.as_dict(), "result": result}


@router.get("/moon-phases", response_model=MoonPhasesResponse, response_model_exclude_none=True)
def moon_phases(
    dt: Optional[str] = Query(None),
    jd: Optional[float] = Query(None),
    loc: Optional[str] = Query(None),
    cycles: int = Query(1, description="Number of lunar cycles"),
    oracle: PositionOracle = Depends(get_oracle),
):
    date = resolve_date(dt, jd)
    geo = geo_or_zero(loc)
    num_cycles = min(max(cycles, 1), MAX_CYCLES)
    phases = calc_moon_phases(oracle, date.jd, geo, num_cycles)
    return {
        "valid": len(phases) > 0,
        "date": date.as_dict(),
        "geo": geo.as_dict(),
        "phases": [phase.as_dict() for phase in phases],
    }


@router.get("/rise-trans-check", response_model=RiseTransCheckResponse)
def rise_trans_check(
    dt: Optional[str] = Query(None),
    jd: Optional[float] = Query(None),
    loc: Optional[str] = Query(None),
    bodies: Optional[str] = Query(None),
    iso: int = Query(0),
    mode: Optional[int] = Query(None),
    oracle: PositionOracle = Depends(get_oracle),
):
    """Raw rise/set/MC/IC primitives per body for diagnosing the native library."""

    date = resolve_date(dt, jd)
    geo = geo_or_zero(loc)
    transition_mode = TransitionMode.from_value(mode)
    results = {event.value: [] for event in TransitEvent}
    num_valid = 0
    keys = parse_body_keys(bodies)
    for key in keys:
        for event in TransitEvent:
            value = oracle.rise_trans(date.jd, key, geo.lat, geo.lng, event, transition_mode)
            if event is TransitEvent.MC and value >= 1.0:
                num_valid += 1
            results[event.value].append({"key": key, "value": jd_to_iso(value) if iso > 0 else value})
    if num_valid != len(keys):
        logger.warning("rise_trans_mc_invalid", extra={"jd": date.jd, "valid": num_valid, "keys": len(keys)})
    notes = {
        "modes": [f"{item.value} => {item.label}" for item in TransitionMode],
        "mode": transition_mode.label,
        "date": date.as_dict(),
        "geo": geo.as_dict(),
    }
    return {"valid": num_valid == len(keys) and len(keys) > 0, "astroNotes": notes, "results": results}
