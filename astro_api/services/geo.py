"""Observer coordinates and helpers for parsing ``loc`` query strings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class GeoPos:
    lat: float
    lng: float
    alt: float = 0.0

    @classmethod
    def zero(cls) -> "GeoPos":
        return cls(0.0, 0.0, 0.0)

    def as_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng, "alt": self.alt}


def loc_string_to_geo(loc: Optional[str]) -> Optional[GeoPos]:
    """Parse ``"lat,lng[,alt]"``; non-numeric parts are skipped.

    Returns ``None`` when fewer than two numbers are present.
    """

    if not loc:
        return None
    parts = []
    for raw in loc.split(","):
        try:
            parts.append(float(raw.strip()))
        except ValueError:
            continue
    if len(parts) < 2:
        return None
    alt = parts[2] if len(parts) > 2 else 0.0
    return GeoPos(parts[0], parts[1], alt)


def geo_or_zero(loc: Optional[str]) -> GeoPos:
    return loc_string_to_geo(loc) or GeoPos.zero()


__all__ = ["GeoPos", "geo_or_zero", "loc_string_to_geo"]
