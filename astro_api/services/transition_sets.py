"""Records produced by the rise/set engines and their JSON renderings."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict

from .dates import MIN_JD, jd_to_iso

# Degrees within which a body skimming the horizon still counts as up or down
UP_DOWN_TOLERANCE = 0.5


@dataclass(frozen=True)
class AltitudeSample:
    """One altitude reading. ``mode`` is ``rise``, ``set``, ``mc``, ``ic`` or ``""``."""

    mode: str = ""
    mins: float = 0.0
    jd: float = 0.0
    value: float = 0.0

    def with_mode(self, mode: str) -> "AltitudeSample":
        return replace(self, mode=mode)


@dataclass(frozen=True)
class TransitionSet:
    rise: float = 0.0
    mc: float = 0.0
    set: float = 0.0
    ic: float = 0.0

    def as_dict(self, iso: bool = False) -> Dict[str, Any]:
        values = asdict(self)
        if iso:
            return {key: jd_to_iso(value) for key, value in values.items()}
        return values


@dataclass(frozen=True)
class AltTransitionSet:
    min: float = 0.0
    rise: float = 0.0
    mc: float = 0.0
    set: float = 0.0
    ic: float = 0.0
    max: float = 0.0

    def as_dict(self, iso: bool = False) -> Dict[str, Any]:
        if not iso:
            return asdict(self)
        data: Dict[str, Any] = {"min": self.min}
        for key in ("rise", "mc", "set", "ic"):
            value = jd_to_iso(getattr(self, key))
            if value or key in ("mc", "ic"):
                data[key] = value
        data["max"] = self.max
        return data


@dataclass(frozen=True)
class ExtendedTransitionSet:
    """A day's transitions linked to the neighbouring rise/set.

    While the body stays up all day ``prev_set`` holds the previous rise and
    ``next_rise`` the next set; :meth:`as_dict` renames them accordingly.
    """

    prev_set: float = 0.0
    rise: float = 0.0
    mc: float = 0.0
    set: float = 0.0
    ic: float = 0.0
    next_rise: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def is_up(self) -> bool:
        return (self.rise == 0.0 or self.set == 0.0) and self.min >= -UP_DOWN_TOLERANCE

    def is_down(self) -> bool:
        return (self.rise == 0.0 or self.set == 0.0) and self.max <= UP_DOWN_TOLERANCE

    def needs_rise(self) -> bool:
        return self.rise < MIN_JD and self.max > 0.0 and self.min < 0.0

    def with_links(self, prev_jd: float, next_jd: float) -> "ExtendedTransitionSet":
        return replace(self, prev_set=prev_jd, next_rise=next_jd)

    def as_dict(self, iso: bool = False) -> Dict[str, Any]:
        up = self.is_up()
        prev_key = "prevRise" if up else "prevSet"
        next_key = "nextSet" if up else "nextRise"
        if not iso:
            return {
                prev_key: self.prev_set,
                "rise": self.rise,
                "mc": self.mc,
                "set": self.set,
                "ic": self.ic,
                next_key: self.next_rise,
                "min": self.min,
                "max": self.max,
            }
        data: Dict[str, Any] = {}
        pairs = (
            (prev_key, self.prev_set),
            ("rise", self.rise),
            ("mc", self.mc),
            ("set", self.set),
            ("ic", self.ic),
            (next_key, self.next_rise),
        )
        for key, value in pairs:
            rendered = jd_to_iso(value)
            # ic is always present, like the JD rendering
            if rendered or key == "ic":
                data[key] = rendered
        data["min"] = self.min
        data["max"] = self.max
        return data


__all__ = [
    "AltTransitionSet",
    "AltitudeSample",
    "ExtendedTransitionSet",
    "TransitionSet",
    "UP_DOWN_TOLERANCE",
]
