"""Position oracle contract used by the transition and lunar phase engines.

The engines never talk to an ephemeris library directly. They receive an
object satisfying :class:`PositionOracle`; production code uses the Swiss
Ephemeris implementation in :mod:`astro_api.services.ephem`.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Protocol, Tuple

from .geo import GeoPos

# Swiss Ephemeris rise/transit bits (swephexp.h)
CALC_RISE = 1
CALC_SET = 2
CALC_MTRANSIT = 4
CALC_ITRANSIT = 8
BIT_DISC_CENTER = 256
BIT_NO_REFRACTION = 512
BIT_DISC_BOTTOM = 8192
BIT_FIXED_DISC_SIZE = 16384


class TransitEvent(Enum):
    RISE = "rise"
    SET = "set"
    MC = "mc"
    IC = "ic"

    @property
    def flag(self) -> int:
        return _EVENT_FLAGS[self]

    @property
    def mirror(self) -> "TransitEvent":
        """The same event seen for the antipodal point, whose altitude is negated."""

        return _MIRRORED_EVENTS[self]


_EVENT_FLAGS = {
    TransitEvent.RISE: CALC_RISE,
    TransitEvent.SET: CALC_SET,
    TransitEvent.MC: CALC_MTRANSIT,
    TransitEvent.IC: CALC_ITRANSIT,
}

_MIRRORED_EVENTS = {
    TransitEvent.RISE: TransitEvent.SET,
    TransitEvent.SET: TransitEvent.RISE,
    TransitEvent.MC: TransitEvent.IC,
    TransitEvent.IC: TransitEvent.MC,
}


class TransitionMode(IntEnum):
    """Disc and refraction convention for horizon crossings."""

    UNADJUSTED = 0
    NO_REFRACTION = 1
    CENTER_DISC_NO_REFRACTION = 2
    CENTER_DISC = 3
    BOTTOM_DISC_NO_REFRACTION = 4
    BOTTOM_DISC = 5
    FIXED_DISC_NO_REFRACTION = 6
    FIXED_DISC = 7

    @classmethod
    def from_value(cls, value: Optional[int]) -> "TransitionMode":
        try:
            return cls(int(value)) if value is not None else cls.CENTER_DISC_NO_REFRACTION
        except ValueError:
            return cls.UNADJUSTED

    @property
    def flags(self) -> int:
        return _MODE_FLAGS[self]

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]


_MODE_FLAGS = {
    TransitionMode.UNADJUSTED: 0,
    TransitionMode.NO_REFRACTION: BIT_NO_REFRACTION,
    TransitionMode.CENTER_DISC_NO_REFRACTION: BIT_DISC_CENTER | BIT_NO_REFRACTION,
    TransitionMode.CENTER_DISC: BIT_DISC_CENTER,
    TransitionMode.BOTTOM_DISC_NO_REFRACTION: BIT_DISC_BOTTOM | BIT_NO_REFRACTION,
    TransitionMode.BOTTOM_DISC: BIT_DISC_BOTTOM,
    TransitionMode.FIXED_DISC_NO_REFRACTION: BIT_FIXED_DISC_SIZE | BIT_NO_REFRACTION,
    TransitionMode.FIXED_DISC: BIT_FIXED_DISC_SIZE,
}

_MODE_LABELS = {
    TransitionMode.UNADJUSTED: "None / unadjusted",
    TransitionMode.NO_REFRACTION: "No refraction only",
    TransitionMode.CENTER_DISC_NO_REFRACTION: "Centre disc + no refraction",
    TransitionMode.CENTER_DISC: "Centre disc only",
    TransitionMode.BOTTOM_DISC_NO_REFRACTION: "Bottom disc + no refraction",
    TransitionMode.BOTTOM_DISC: "Bottom disc only",
    TransitionMode.FIXED_DISC_NO_REFRACTION: "Fixed disc + no refraction",
    TransitionMode.FIXED_DISC: "Fixed disc only",
}


@dataclass(frozen=True)
class BodyPosition:
    lng: float
    lat: float
    lng_speed: float = 0.0
    lat_speed: float = 0.0


@dataclass(frozen=True)
class Phenomena:
    phase_angle: float = 0.0
    phase_illuminated: float = 0.0
    elongation: float = 0.0
    apparent_diameter: float = 0.0
    apparent_magnitude: float = 0.0

    def as_dict(self) -> dict:
        return {
            "phaseAngle": self.phase_angle,
            "phaseIlluminated": self.phase_illuminated,
            "elongationOfPlanet": self.elongation,
            "apparentDiameterOfDisc": self.apparent_diameter,
            "apparentMagnitude": self.apparent_magnitude,
        }


class PositionOracle(Protocol):
    def session(self, geo: Optional[GeoPos] = None) -> AbstractContextManager: ...

    def position(
        self,
        jd: float,
        key: str,
        geo: Optional[GeoPos] = None,
        topocentric: bool = False,
    ) -> BodyPosition: ...

    def equatorial(
        self, jd: float, key: str, geo: Optional[GeoPos] = None, topocentric: bool = False
    ) -> Tuple[float, float]: ...

    def altitude_azimuth(
        self,
        jd: float,
        is_equatorial: bool,
        geo_lat: float,
        geo_lng: float,
        lng: float,
        lat: float,
    ) -> Tuple[float, float]: ...

    def phenomena(self, jd: float, key: str) -> Phenomena: ...

    def rise_trans(
        self,
        jd: float,
        key: str,
        lat: float,
        lng: float,
        event: TransitEvent,
        mode: TransitionMode = TransitionMode.CENTER_DISC_NO_REFRACTION,
    ) -> float: ...


def calc_altitude(
    oracle: PositionOracle, jd: float, geo: GeoPos, lng: float, lat: float
) -> float:
    """Altitude in degrees of ecliptic coordinates ``lng``/``lat`` for an observer."""

    return oracle.altitude_azimuth(jd, False, geo.lat, geo.lng, lng, lat)[1]


def calc_altitude_object(oracle: PositionOracle, jd: float, geo: GeoPos, key: str) -> float:
    """Altitude of a body at ``jd`` using its topocentric position."""

    pos = oracle.position(jd, key, geo, topocentric=True)
    return calc_altitude(oracle, jd, geo, pos.lng, pos.lat)


__all__ = [
    "BodyPosition",
    "Phenomena",
    "PositionOracle",
    "TransitEvent",
    "TransitionMode",
    "calc_altitude",
    "calc_altitude_object",
]
