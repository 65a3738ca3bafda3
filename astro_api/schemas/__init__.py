from .rise_set import (
    DateOut,
    GeoOut,
    KeyItems,
    KeyValue,
    MoonPhaseOut,
    MoonPhasesResponse,
    PhenoItem,
    PhenoResponse,
    RiseSetResponse,
    RiseTransCheckResponse,
    SunRiseSetResponse,
    TransposedResponse,
)
