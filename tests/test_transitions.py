import pytest

from astro_api.services.geo import GeoPos
from astro_api.services.transitions import (
    calc_next_set_or_prev_rise_jd,
    calc_transition_set,
    calc_transition_set_alt,
    calc_transition_set_extended,
    calc_transition_set_fast,
    get_transition_sets,
    get_transition_sets_extended,
    is_near_poles,
    next_mc,
    next_mc_normal,
)

# Noon UTC, 2024-03-20
MARCH_20_NOON = 2460390.0
DAY_START = 2460389.5


def test_is_near_poles():
    assert is_near_poles(60.0)
    assert is_near_poles(-75.0)
    assert not is_near_poles(59.9)


def test_sun_day_in_london_is_ordered(oracle, london):
    ts = calc_transition_set(oracle, MARCH_20_NOON, "su", london)
    assert DAY_START < ts.rise < ts.mc < ts.set < ts.ic
    assert ts.set - ts.rise == pytest.approx(0.5, abs=0.02)


def test_mc_falls_back_to_rise_set_midpoint(oracle, broken_oracle, london):
    assert next_mc(broken_oracle, DAY_START, "su", london) == 0.0
    fallback = next_mc_normal(broken_oracle, DAY_START, "su", london)
    assert abs(fallback - next_mc(oracle, DAY_START, "su", london)) < 0.01


def test_transition_set_is_deterministic(oracle, london):
    first = calc_transition_set_alt(oracle, MARCH_20_NOON, "mo", london)
    second = calc_transition_set_alt(oracle, MARCH_20_NOON, "mo", london)
    assert first == second


def test_sampled_path_agrees_with_fast_path(oracle):
    geo = GeoPos(70.0, 0.0)
    sampled = calc_transition_set(oracle, MARCH_20_NOON, "su", geo)
    fast = calc_transition_set_fast(oracle, MARCH_20_NOON, "su", geo)
    assert abs(sampled.rise - fast.rise) < 0.01
    assert abs(sampled.mc - fast.mc) < 0.01
    assert abs(sampled.set - fast.set) < 0.01


def test_extended_set_links_neighbouring_events(oracle, london):
    row = calc_transition_set_extended(oracle, MARCH_20_NOON, "su", london)
    assert row.prev_set < row.rise < row.set < row.next_rise
    assert row.max > 0.0 > row.min
    data = row.as_dict()
    assert "prevSet" in data and "nextRise" in data


def test_next_set_search_at_polar_day(oracle):
    geo = GeoPos(80.0, 0.0)
    jd = 2460471.5
    next_set_jd = calc_next_set_or_prev_rise_jd(oracle, jd, geo, "su", forward=True)
    prev_rise_jd = calc_next_set_or_prev_rise_jd(oracle, jd, geo, "su", forward=False)
    assert next_set_jd > jd + 30.0
    assert 0.0 < prev_rise_jd < jd - 30.0


def test_get_transition_sets_shape(oracle, london):
    results = get_transition_sets(oracle, MARCH_20_NOON, ["su", "ma"], london)
    assert [r["key"] for r in results] == ["su", "ma"]
    assert "nextRise" in results[0]["items"]
    assert set(results[1]["items"]) == {"rise", "mc", "set", "ic"}


def test_get_transition_sets_extended_skips_long_keys(oracle, london):
    results = get_transition_sets_extended(oracle, MARCH_20_NOON, ["su", "xyz"], london, days=2, iso=True)
    assert len(results) == 1
    items = results[0]["items"]
    assert len(items) == 2
    assert items[0]["rise"].startswith("2024-03-20T")
    assert items[1]["rise"].startswith("2024-03-21T")
