"""Swiss Ephemeris position oracle used by the rise/set and lunar phase services."""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

import swisseph as swe

from .angles import calc_opposite
from .geo import GeoPos
from .oracle import BodyPosition, Phenomena, TransitEvent, TransitionMode

logger = logging.getLogger(__name__)

# Engine version for API responses
try:
    ENGINE_VERSION = f"swisseph-{swe.version}"
except AttributeError:
    ENGINE_VERSION = "swisseph-2.10"  # Fallback if version not available

DEFAULT_EPHE_PATH = "/usr/share/libswe/ephe"

# Hamburg school hypothetical bodies (SE_FICT_OFFSET + n)
KRONOS = 43
ISIS = 48

BODY_KEYS: Dict[str, int] = {
    "su": swe.SUN,
    "mo": swe.MOON,
    "me": swe.MERCURY,
    "ve": swe.VENUS,
    "ea": swe.EARTH,
    "ma": swe.MARS,
    "ju": swe.JUPITER,
    "sa": swe.SATURN,
    "ur": swe.URANUS,
    "ne": swe.NEPTUNE,
    "pl": swe.PLUTO,
    "ra": swe.TRUE_NODE,
    "ke": swe.TRUE_NODE,
    "sn": swe.TRUE_NODE,
    "mn": swe.MEAN_NODE,
    "kr": KRONOS,
    "is": ISIS,
    "jn": swe.JUNO,
    "ce": swe.CERES,
    "ch": swe.CHIRON,
}

# Descending node keys: the true node reflected by 180 degrees
REFLECTED_KEYS = frozenset({"ke", "sn"})

# The library keeps the topocentric observer globally per process.
_LOCK = threading.RLock()
_MODE_STATE: Dict[str, Optional[Tuple[float, float, float]]] = {"topo": None}


def _backend_flag() -> int:
    """Return the Swiss Ephemeris backend flag based on environment configuration."""

    raw_backend = os.getenv("EPHEMERIS_BACKEND")
    backend = raw_backend.strip().lower() if raw_backend else "swieph"
    return swe.FLG_MOSEPH if backend == "moseph" else swe.FLG_SWIEPH


def init_paths(ephe_dir: str | os.PathLike[str] | None) -> Optional[str]:
    """Set the Swiss Ephemeris file search path when available.

    Returns the applied path, or ``None`` when the built-in Moshier fallback
    will be used.
    """

    if not ephe_dir:
        return None

    path = os.fspath(ephe_dir)
    if os.path.isdir(path):
        swe.set_ephe_path(path)
        logger.info("ephemeris_path_set", extra={"path": path})
        return path
    logger.warning("ephemeris_path_missing", extra={"path": path})
    return None


def body_number(key: str) -> int:
    """Map a two-letter body key to a Swiss Ephemeris number; unknown keys are Earth."""

    code = BODY_KEYS.get(key.strip().lower()) if key else None
    if code is None:
        logger.debug("unknown_body_key", extra={"key": key})
        return swe.EARTH
    return code


def _apply_mode(topo: Optional[Tuple[float, float, float]]) -> None:
    if topo is not None:
        swe.set_topo(*topo)
    _MODE_STATE["topo"] = topo


class SwissEphemerisOracle:
    """Position oracle backed by ``pyswisseph``."""

    def __init__(self, ephe_path: Optional[str] = None, backend_flag: Optional[int] = None) -> None:
        self.ephe_path = init_paths(ephe_path)
        self.backend_flag = backend_flag if backend_flag is not None else _backend_flag()

    @contextmanager
    def session(self, geo: Optional[GeoPos] = None) -> Iterator["SwissEphemerisOracle"]:
        """Hold the library lock with the given topocentric observer.

        The previous observer is restored on exit so nested sessions behave.
        """

        with _LOCK:
            previous_topo = _MODE_STATE["topo"]
            topo = (geo.lng, geo.lat, geo.alt) if geo is not None else previous_topo
            _apply_mode(topo)
            try:
                yield self
            finally:
                _apply_mode(previous_topo)

    def _flags(self, topocentric: bool = False) -> int:
        flag = self.backend_flag | swe.FLG_SPEED
        if topocentric:
            flag |= swe.FLG_TOPOCTR
        return flag

    def position(
        self,
        jd: float,
        key: str,
        geo: Optional[GeoPos] = None,
        topocentric: bool = False,
    ) -> BodyPosition:
        with self.session(geo if topocentric else None):
            values, _ = swe.calc_ut(jd, body_number(key), self._flags(topocentric))
        lng, lat, _dist, lng_speed, lat_speed, _dist_speed = values[:6]
        if key in REFLECTED_KEYS:
            lng = calc_opposite(lng)
            lat = -lat
        return BodyPosition(lng=lng % 360.0, lat=lat, lng_speed=lng_speed, lat_speed=lat_speed)

    def equatorial(
        self, jd: float, key: str, geo: Optional[GeoPos] = None, topocentric: bool = False
    ) -> Tuple[float, float]:
        flag = self._flags(topocentric) | swe.FLG_EQUATORIAL
        with self.session(geo if topocentric else None):
            values, _ = swe.calc_ut(jd, body_number(key), flag)
        ra, dec = values[0], values[1]
        if key in REFLECTED_KEYS:
            ra, dec = calc_opposite(ra), -dec
        return ra, dec

    def altitude_azimuth(
        self,
        jd: float,
        is_equatorial: bool,
        geo_lat: float,
        geo_lng: float,
        lng: float,
        lat: float,
    ) -> Tuple[float, float]:
        """Return ``(azimuth, altitude)`` in degrees (true altitude, no refraction)."""

        mode = swe.EQU2HOR if is_equatorial else swe.ECL2HOR
        result = swe.azalt(jd, mode, (geo_lng, geo_lat, 0.0), 0.0, 0.0, (lng, lat, 1.0))
        return result[0], result[1]

    def phenomena(self, jd: float, key: str) -> Phenomena:
        result = swe.pheno_ut(jd, body_number(key), self.backend_flag)
        # Older bindings return ``(attr, retflag)``
        attr = result[0] if isinstance(result[0], (tuple, list)) else result
        return Phenomena(
            phase_angle=attr[0],
            phase_illuminated=attr[1],
            elongation=attr[2],
            apparent_diameter=attr[3],
            apparent_magnitude=attr[4],
        )

    def rise_trans(
        self,
        jd: float,
        key: str,
        lat: float,
        lng: float,
        event: TransitEvent,
        mode: TransitionMode = TransitionMode.CENTER_DISC_NO_REFRACTION,
    ) -> float:
        """Return the JD of the next ``event`` after ``jd``, or 0.0 when there is none.

        The library only knows the true node, so for the reflected node keys
        the antipodal event is computed: the south node rises when the north
        node sets and culminates at its lower transit.
        """

        if key in REFLECTED_KEYS:
            event = event.mirror
        rsmi = event.flag
        if event in (TransitEvent.RISE, TransitEvent.SET):
            rsmi |= mode.flags
        geopos = (lng, lat, 0.0)
        try:
            with _LOCK:
                result, times = swe.rise_trans(
                    jd, body_number(key), rsmi, geopos, 0.0, 0.0, self.backend_flag
                )
        except swe.Error as exc:  # type: ignore[attr-defined]
            logger.debug(
                "rise_trans_failed",
                extra={"key": key, "jd": jd, "event": event.value, "error": str(exc)},
            )
            return 0.0
        if result < 0 or not times:
            return 0.0
        return times[0]


_DEFAULT_ORACLE: Optional[SwissEphemerisOracle] = None


def default_oracle() -> SwissEphemerisOracle:
    """Return the process-wide oracle, creating it on first use."""

    global _DEFAULT_ORACLE
    with _LOCK:
        if _DEFAULT_ORACLE is None:
            _DEFAULT_ORACLE = SwissEphemerisOracle(os.getenv("SWEPH_PATH", DEFAULT_EPHE_PATH))
    return _DEFAULT_ORACLE


__all__ = [
    "BODY_KEYS",
    "ENGINE_VERSION",
    "SwissEphemerisOracle",
    "body_number",
    "default_oracle",
    "init_paths",
]
