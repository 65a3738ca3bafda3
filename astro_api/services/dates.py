"""Julian-day conversions and local day boundaries."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

# Julian day of 1970-01-01T00:00:00 UTC
UNIX_EPOCH_JD = 2440587.5

# Anything below this is treated as "no event"
MIN_JD = 1000.0

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_real_jd(jd: Optional[float]) -> bool:
    return jd is not None and jd >= MIN_JD


def datetime_to_jd(moment: datetime) -> float:
    """Convert a datetime into a Julian Day (UT). Naive values are taken as UTC."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).timestamp() / 86400.0 + UNIX_EPOCH_JD


def jd_to_datetime(jd: float) -> datetime:
    return _EPOCH + timedelta(days=jd - UNIX_EPOCH_JD)


def jd_to_iso(jd: Optional[float]) -> str:
    """Render a JD as ``YYYY-MM-DDTHH:MM:SS`` UTC, or an empty string for sentinels."""

    if not is_real_jd(jd):
        return ""
    try:
        return jd_to_datetime(jd).strftime(ISO_FORMAT)
    except OverflowError:
        return ""


def iso_string_to_datetime(value: str) -> datetime:
    """Parse an ISO-8601-like string leniently.

    Accepts ``YYYY-mm-dd HH:MM:SS`` separated by a space or ``T`` with or
    without hours, minutes or seconds; missing parts become zero. Unparseable
    input yields the Unix epoch.
    """

    base = value.split(".")[0].strip().rstrip("Z")
    clean = base.replace("T", " ").strip()
    if " " in clean:
        date_part, time_part = clean.split(" ", 1)
    else:
        date_part, time_part = clean, ""

    date_parts = date_part.split("-") if len(date_part) > 1 else ["2000", "01", "01"]
    while len(date_parts) < 3:
        date_parts.append("01")
    time_parts = time_part.split(":") if len(time_part) > 1 else ["00", "00", "00"]
    while len(time_parts) < 3:
        time_parts.append("00")

    formatted = "{}-{}-{} {}:{}:{}".format(*date_parts[:3], *time_parts[:3])
    try:
        return datetime.strptime(formatted, "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return _EPOCH


def datetime_string_to_jd(value: str) -> float:
    return datetime_to_jd(iso_string_to_datetime(value))


@dataclass(frozen=True)
class DateInfo:
    utc: str
    jd: float

    @classmethod
    def from_jd(cls, jd: float) -> "DateInfo":
        return cls(utc=jd_to_iso(jd), jd=jd)

    @classmethod
    def now(cls) -> "DateInfo":
        return cls.from_jd(datetime_to_jd(datetime.now(timezone.utc)))

    def as_dict(self) -> Dict[str, Any]:
        return {"utc": self.utc, "jd": self.jd}


def resolve_date(dt: Optional[str] = None, jd: Optional[float] = None) -> DateInfo:
    """Pick the request date: a plausible ``jd`` wins, then ``dt``, then now."""

    if jd is not None and jd > 1_000_000.0:
        return DateInfo.from_jd(jd)
    if dt:
        return DateInfo.from_jd(datetime_string_to_jd(dt))
    return DateInfo.now()


def day_of_year(jd: float) -> int:
    return jd_to_datetime(jd).timetuple().tm_yday


def longitude_to_solar_time_offset_jd(lng: float) -> float:
    return (0.0 - lng / 15.0) / 24.0


def start_jd_geo(jd: float, lng: float) -> float:
    """Return the JD of local solar midnight starting the day that contains ``jd``."""

    offset = longitude_to_solar_time_offset_jd(lng)
    jd_progress = jd % 1.0
    adjusted_progress = offset - jd_progress
    start_offset = 0.5 if adjusted_progress >= 0.5 else -0.5
    ref_jd = math.floor(jd) + start_offset + offset
    diff = jd - ref_jd
    if diff > 1.0:
        return ref_jd + 1.0
    if diff < -1.0:
        return ref_jd - 1.0
    return ref_jd


def start_jd_geo_tz(jd: float, lng: float, tz_offset_secs: Optional[int] = None) -> float:
    """Like :func:`start_jd_geo` but uses a UTC offset (seconds) when known."""

    lng_offset = tz_offset_secs / 240.0 if tz_offset_secs is not None else lng
    return start_jd_geo(jd, lng_offset)


__all__ = [
    "DateInfo",
    "MIN_JD",
    "datetime_string_to_jd",
    "datetime_to_jd",
    "day_of_year",
    "is_real_jd",
    "iso_string_to_datetime",
    "jd_to_datetime",
    "jd_to_iso",
    "longitude_to_solar_time_offset_jd",
    "resolve_date",
    "start_jd_geo",
    "start_jd_geo_tz",
]
