"""Angular helpers for longitudes in degrees."""

from __future__ import annotations


def calc_opposite(lng: float) -> float:
    return (lng + 180.0) % 360.0


def signed_delta(angle: float, target: float) -> float:
    """Return the signed difference between ``angle`` and ``target`` in degrees.

    The result is in the range [-180, 180). Positive values mean the angle has
    moved past the target, while negative values indicate it is still
    approaching.
    """

    return (angle - target + 540.0) % 360.0 - 180.0


def calc_angle(lng1: float, lng2: float) -> float:
    """Return the forward angle from ``lng2`` to ``lng1`` in the range [0, 360)."""

    return (lng1 + 360.0 - lng2) % 360.0


def calc_sun_moon_angle(moon_lng: float, sun_lng: float) -> tuple[float, bool, int]:
    """Return ``(angle, waxing, phase)`` for a Moon/Sun longitude pair.

    ``phase`` is the lunar quarter (1 = new moon to first quarter, 4 = last
    quarter to new moon).
    """

    angle = calc_angle(moon_lng, sun_lng)
    waxing = angle <= 180.0
    phase = int(angle // 90.0) + 1
    return angle, waxing, min(phase, 4)


__all__ = [
    "calc_angle",
    "calc_opposite",
    "calc_sun_moon_angle",
    "signed_delta",
]
