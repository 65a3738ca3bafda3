from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any, Union


class GeoOut(BaseModel):
    lat: float
    lng: float
    alt: float = 0.0


class DateOut(BaseModel):
    utc: str
    jd: float


class KeyValue(BaseModel):
    key: str
    value: Union[float, str]


class KeyItems(BaseModel):
    key: str
    items: Union[List[Dict[str, Any]], Dict[str, Any]]


class RiseSetResponse(BaseModel):
    valid: bool
    date: DateOut
    geo: GeoOut
    sets: List[KeyItems]


class SunRiseSetResponse(BaseModel):
    valid: bool
    date: DateOut
    geo: GeoOut
    sets: Optional[List[Dict[str, Any]]] = None  # full=1: linked daily records
    items: Optional[List[KeyValue]] = None  # full=0: flat non-zero events


class TransposedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    date: DateOut
    geo: GeoOut
    historic_date: DateOut = Field(alias="historicDate")
    historic_geo: GeoOut = Field(alias="historicGeo")
    days: int
    transposed: List[KeyItems]
    current: List[KeyItems]


class PhenoItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    phase_angle: float = Field(alias="phaseAngle")
    phase_illuminated: float = Field(alias="phaseIlluminated")
    elongation_of_planet: float = Field(alias="elongationOfPlanet")
    apparent_diameter_of_disc: float = Field(alias="apparentDiameterOfDisc")
    apparent_magnitude: float = Field(alias="apparentMagnitude")


class PhenoResponse(BaseModel):
    valid: bool
    date: DateOut
    result: List[PhenoItem]


class MoonPhaseOut(BaseModel):
    jd: float
    utc: str
    angle: float
    num: int
    waxing: bool
    days: Optional[float] = None


class MoonPhasesResponse(BaseModel):
    valid: bool
    date: DateOut
    geo: GeoOut
    phases: List[MoonPhaseOut]


class RiseTransCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    astro_notes: Dict[str, Any] = Field(alias="astroNotes")
    results: Dict[str, List[KeyValue]]
