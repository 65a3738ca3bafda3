"""Shared fixtures: an analytic position oracle with mean-motion Sun and Moon."""

import math
import os
from contextlib import contextmanager

os.environ.setdefault("EPHEMERIS_BACKEND", "moseph")

import pytest

from astro_api.services.geo import GeoPos
from astro_api.services.oracle import BodyPosition, Phenomena, TransitEvent, TransitionMode

J2000 = 2451545.0
OBLIQUITY = 23.4393

# key: (longitude at J2000, degrees per day)
MEAN_MOTIONS = {
    "su": (280.46, 0.9856474),
    "mo": (218.316, 13.176396),
    "me": (252.25, 1.2),
    "ve": (181.98, 1.1),
    "ma": (355.45, 0.5240208),
    "ju": (34.40, 0.0830853),
    "sa": (50.08, 0.0334442),
}

DIAMETERS = {"su": 0.533, "mo": 0.518}


class FakeOracle:
    """Deterministic oracle used in place of the Swiss Ephemeris.

    ``rise_trans`` scans the analytic altitude curve, so horizon and meridian
    events agree with the altitudes the sampler sees. ``broken_transits``
    makes the MC/IC primitive fail the way some native builds do.
    """

    def __init__(self, broken_transits: bool = False):
        self.broken_transits = broken_transits
        self.sessions = 0

    @contextmanager
    def session(self, geo=None):
        self.sessions += 1
        yield self

    def position(self, jd, key, geo=None, topocentric=False):
        base, speed = MEAN_MOTIONS.get(key, (100.0, 0.0))
        d = jd - J2000
        lng = (base + speed * d) % 360.0
        lat = 0.0
        lat_speed = 0.0
        if key == "mo":
            arg = math.radians(93.27 + 13.22935 * d)
            lat = 5.1 * math.sin(arg)
            lat_speed = 5.1 * math.cos(arg) * math.radians(13.22935)
        return BodyPosition(lng=lng, lat=lat, lng_speed=speed, lat_speed=lat_speed)

    def _to_equatorial(self, lng, lat):
        eps = math.radians(OBLIQUITY)
        lam = math.radians(lng)
        beta = math.radians(lat)
        sin_dec = math.sin(beta) * math.cos(eps) + math.cos(beta) * math.sin(eps) * math.sin(lam)
        dec = math.asin(sin_dec)
        y = math.sin(lam) * math.cos(eps) - math.tan(beta) * math.sin(eps)
        ra = math.atan2(y, math.cos(lam))
        return math.degrees(ra) % 360.0, math.degrees(dec)

    def equatorial(self, jd, key, geo=None, topocentric=False):
        pos = self.position(jd, key)
        return self._to_equatorial(pos.lng, pos.lat)

    def _hour_angle(self, jd, geo_lng, ra):
        gmst = 280.46061837 + 360.98564736629 * (jd - J2000)
        return (gmst + geo_lng - ra) % 360.0

    def altitude_azimuth(self, jd, is_equatorial, geo_lat, geo_lng, lng, lat):
        ra, dec = (lng, lat) if is_equatorial else self._to_equatorial(lng, lat)
        ha = math.radians(self._hour_angle(jd, geo_lng, ra))
        phi = math.radians(geo_lat)
        dec_r = math.radians(dec)
        sin_alt = math.sin(phi) * math.sin(dec_r) + math.cos(phi) * math.cos(dec_r) * math.cos(ha)
        alt = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))
        az = math.degrees(
            math.atan2(math.sin(ha), math.cos(ha) * math.sin(phi) - math.tan(dec_r) * math.cos(phi))
        )
        return (az + 180.0) % 360.0, alt

    def phenomena(self, jd, key):
        return Phenomena(apparent_diameter=DIAMETERS.get(key, 0.0))

    def _altitude(self, jd, key, lat, lng):
        pos = self.position(jd, key)
        return self.altitude_azimuth(jd, False, lat, lng, pos.lng, pos.lat)[1]

    def _signed_hour_angle(self, jd, key, lng, offset):
        pos = self.position(jd, key)
        ra, _dec = self._to_equatorial(pos.lng, pos.lat)
        return (self._hour_angle(jd, lng, ra) - offset + 540.0) % 360.0 - 180.0

    def _scan(self, jd, fn, step=1.0 / 144.0, span=2.0):
        prev_jd = jd
        prev = fn(jd)
        t = jd + step
        while t <= jd + span:
            value = fn(t)
            if prev < 0.0 <= value and value - prev < 90.0:
                lo, hi = prev_jd, t
                for _ in range(40):
                    mid = (lo + hi) / 2.0
                    if fn(mid) < 0.0:
                        lo = mid
                    else:
                        hi = mid
                return (lo + hi) / 2.0
            prev_jd, prev = t, value
            t += step
        return 0.0

    def rise_trans(self, jd, key, lat, lng, event, mode=TransitionMode.CENTER_DISC_NO_REFRACTION):
        if event is TransitEvent.RISE:
            return self._scan(jd, lambda t: self._altitude(t, key, lat, lng))
        if event is TransitEvent.SET:
            return self._scan(jd, lambda t: -self._altitude(t, key, lat, lng))
        if self.broken_transits:
            return 0.0
        offset = 0.0 if event is TransitEvent.MC else 180.0
        return self._scan(jd, lambda t: self._signed_hour_angle(t, key, lng, offset))


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def broken_oracle():
    return FakeOracle(broken_transits=True)


@pytest.fixture
def london():
    return GeoPos(51.5, 0.0)


@pytest.fixture
def client(oracle):
    from fastapi.testclient import TestClient

    from astro_api.app import app
    from astro_api.routers.rise_set import get_oracle

    app.dependency_overrides[get_oracle] = lambda: oracle
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_oracle, None)
