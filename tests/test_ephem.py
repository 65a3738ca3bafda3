import pytest

swe = pytest.importorskip("swisseph")

from astro_api.services.ephem import (  # noqa: E402
    SwissEphemerisOracle,
    body_number,
    init_paths,
)
from astro_api.services.geo import GeoPos  # noqa: E402
from astro_api.services.oracle import (  # noqa: E402
    BIT_DISC_CENTER,
    BIT_NO_REFRACTION,
    TransitEvent,
    TransitionMode,
)
from astro_api.services.transitions import calc_transition_set_alt  # noqa: E402

MARCH_20_2024 = 2460389.5


@pytest.fixture
def moshier():
    return SwissEphemerisOracle(None, swe.FLG_MOSEPH)


def test_body_keys_map_to_swiss_numbers():
    assert body_number("su") == swe.SUN
    assert body_number("MO") == swe.MOON
    assert body_number("ke") == swe.TRUE_NODE


def test_unknown_key_falls_back_to_earth():
    assert body_number("zz") == swe.EARTH
    assert body_number("") == swe.EARTH


def test_missing_ephemeris_dir_is_ignored(tmp_path):
    assert init_paths(tmp_path / "missing") is None
    assert init_paths(None) is None


def test_mode_values_and_flags():
    assert TransitionMode.from_value(None) is TransitionMode.CENTER_DISC_NO_REFRACTION
    assert TransitionMode.from_value(99) is TransitionMode.UNADJUSTED
    assert TransitionMode.CENTER_DISC_NO_REFRACTION.flags == BIT_DISC_CENTER | BIT_NO_REFRACTION
    assert TransitionMode.UNADJUSTED.flags == 0


def test_south_node_mirrors_north_node(moshier):
    north = moshier.position(MARCH_20_2024, "ra")
    south = moshier.position(MARCH_20_2024, "ke")
    assert south.lng == pytest.approx((north.lng + 180.0) % 360.0)
    assert south.lat == pytest.approx(-north.lat)


def test_sun_rises_before_it_sets_in_london(moshier):
    london = GeoPos(51.5, -0.1)
    rise = moshier.rise_trans(MARCH_20_2024, "su", london.lat, london.lng, TransitEvent.RISE)
    set_ = moshier.rise_trans(MARCH_20_2024, "su", london.lat, london.lng, TransitEvent.SET)
    mc = moshier.rise_trans(MARCH_20_2024, "su", london.lat, london.lng, TransitEvent.MC)
    assert MARCH_20_2024 < rise < mc < set_ < MARCH_20_2024 + 1.0


def test_altitude_of_sun_at_noon_is_positive(moshier):
    london = GeoPos(51.5, -0.1)
    with moshier.session(london):
        pos = moshier.position(MARCH_20_2024 + 0.5, "su", london, topocentric=True)
    _az, alt = moshier.altitude_azimuth(MARCH_20_2024 + 0.5, False, london.lat, london.lng, pos.lng, pos.lat)
    assert 30.0 < alt < 45.0


def test_sun_disc_diameter(moshier):
    assert 0.5 < moshier.phenomena(MARCH_20_2024, "su").apparent_diameter < 0.56


def test_south_node_events_are_the_north_node_antipodes(moshier):
    london = GeoPos(51.5, -0.1)
    north = calc_transition_set_alt(moshier, MARCH_20_2024 + 0.5, "ra", london)
    south = calc_transition_set_alt(moshier, MARCH_20_2024 + 0.5, "ke", london)

    assert south.min <= south.max
    assert south.max == pytest.approx(-north.min, abs=0.01)
    assert south.rise == pytest.approx(north.set, abs=1e-6)
    assert south.set == pytest.approx(north.rise, abs=1e-6)
    assert south.mc == pytest.approx(north.ic, abs=1e-6)
    assert south.rise != pytest.approx(north.rise, abs=0.01)


def test_south_node_altitude_is_negated_north_altitude(moshier):
    london = GeoPos(51.5, -0.1)
    jd = MARCH_20_2024 + 0.25
    north = moshier.position(jd, "ra")
    south = moshier.position(jd, "sn")
    _az, north_alt = moshier.altitude_azimuth(jd, False, london.lat, london.lng, north.lng, north.lat)
    _az, south_alt = moshier.altitude_azimuth(jd, False, london.lat, london.lng, south.lng, south.lat)
    assert south_alt == pytest.approx(-north_alt, abs=1e-6)
