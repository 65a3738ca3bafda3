import pytest

from astro_api.services.angles import calc_angle, calc_opposite, calc_sun_moon_angle, signed_delta


def test_signed_delta_normalises_within_range():
    # 10° past the target, even across the 0/360 seam.
    delta = signed_delta(5.0, 355.0)
    assert -180.0 <= delta <= 180.0
    assert round(delta, 6) == 10.0
    assert round(signed_delta(350.0, 0.0), 6) == -10.0


def test_calc_angle_is_forward_distance():
    assert calc_angle(10.0, 350.0) == pytest.approx(20.0)
    assert calc_angle(350.0, 10.0) == pytest.approx(340.0)


def test_calc_opposite_wraps():
    assert calc_opposite(270.0) == pytest.approx(90.0)


@pytest.mark.parametrize(
    "moon, sun, phase, waxing",
    [
        (45.0, 0.0, 1, True),
        (100.0, 0.0, 2, True),
        (200.0, 10.0, 3, False),
        (10.0, 100.0, 4, False),
    ],
)
def test_sun_moon_angle_quarters(moon, sun, phase, waxing):
    angle, is_waxing, num = calc_sun_moon_angle(moon, sun)
    assert 0.0 <= angle < 360.0
    assert num == phase
    assert is_waxing is waxing
