from astro_api.services.extremum_refiner import refine_extremum
from astro_api.services.geo import GeoPos
from astro_api.services.oracle import TransitEvent, calc_altitude
from astro_api.services.transition_sets import AltitudeSample

MARCH_20_2024 = 2460389.5


def test_refined_mc_matches_meridian_transit(oracle):
    geo = GeoPos(70.0, 0.0)
    pos = oracle.position(MARCH_20_2024, "su")
    expected = oracle.rise_trans(MARCH_20_2024, "su", geo.lat, geo.lng, TransitEvent.MC)
    # a coarse sample four minutes late
    coarse_jd = expected + 4.0 / 1440.0
    coarse = AltitudeSample("", 0.0, coarse_jd, calc_altitude(oracle, coarse_jd, geo, pos.lng, pos.lat))

    refined = refine_extremum(oracle, coarse, geo, (pos.lng, pos.lat), True)

    assert refined.mode == "mc"
    assert refined.value >= coarse.value
    assert abs(refined.jd - expected) < 0.002


def test_refined_ic_never_worse_than_coarse(oracle):
    geo = GeoPos(70.0, 0.0)
    pos = oracle.position(MARCH_20_2024, "su")
    coarse_jd = MARCH_20_2024 + 3.0 / 1440.0
    coarse = AltitudeSample("", 3.0, coarse_jd, calc_altitude(oracle, coarse_jd, geo, pos.lng, pos.lat))

    refined = refine_extremum(oracle, coarse, geo, (pos.lng, pos.lat), False)

    assert refined.mode == "ic"
    assert refined.value <= coarse.value
