import pytest

from astro_api.services.lunar_phases import (
    MAX_ITERATIONS,
    QUARTER_MONTH,
    adjusted_micro_increment,
    boundary_angle,
    calc_moon_phases,
    remaining_angle,
)

MARCH_20_2024 = 2460389.5


def test_boundary_angles():
    assert [boundary_angle(num) for num in (1, 2, 3, 4)] == [360.0, 90.0, 180.0, 270.0]


def test_remaining_angle_is_signed():
    assert remaining_angle(85.0, 90.0) == pytest.approx(5.0)
    assert remaining_angle(95.0, 90.0) == pytest.approx(-5.0)
    assert remaining_angle(358.0, 360.0) == pytest.approx(2.0)
    assert remaining_angle(1.0, 360.0) == pytest.approx(-1.0)


def test_micro_increment_shrinks_near_target():
    assert adjusted_micro_increment(10.0, 1.0 / 12.0) == 1.0 / 12.0
    assert adjusted_micro_increment(3.0, 1.0 / 12.0) == 1.0 / 24.0
    assert adjusted_micro_increment(0.001, 1.0 / 12.0) == 1.0 / 15360.0


def test_one_cycle_of_phases(oracle, london):
    phases = calc_moon_phases(oracle, MARCH_20_2024, london)

    assert len(phases) == 4
    assert phases[0].jd > MARCH_20_2024
    assert phases[0].days is None
    for phase in phases:
        assert phase.iterations < MAX_ITERATIONS
        assert phase.angle == pytest.approx(phase.target_angle % 360.0)
        assert phase.waxing is (phase.num <= 2)
    for prev, current in zip(phases, phases[1:]):
        assert current.num == prev.num % 4 + 1
        assert current.days == pytest.approx(QUARTER_MONTH, abs=0.05)


def test_cycles_extend_listing(oracle, london):
    phases = calc_moon_phases(oracle, MARCH_20_2024, london, cycles=3)
    assert len(phases) == 12
    assert phases[-1].jd - phases[0].jd == pytest.approx(11 * QUARTER_MONTH, abs=0.5)


def test_phase_dict_includes_utc(oracle, london):
    data = calc_moon_phases(oracle, MARCH_20_2024, london)[1].as_dict()
    assert set(data) == {"jd", "utc", "angle", "num", "waxing", "days"}
    assert data["utc"].startswith("2024-")
