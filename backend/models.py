# models.py
# typed search criteria, venue records and the search outcome variant

import math
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Preference(str, Enum):
    museums = "museums"
    galleries = "galleries"
    theaters = "theaters"
    concerts = "concerts"
    monuments = "monuments"
    festivals = "festivals"


VALIDATION_MESSAGE = "Por favor, introduce una ubicación o usa tu ubicación actual"

# display labels, ids stay in english for the webhook
PREFERENCE_LABELS = {
    Preference.museums: "Museos",
    Preference.galleries: "Galerías",
    Preference.theaters: "Teatros",
    Preference.concerts: "Conciertos",
    Preference.monuments: "Monumentos",
    Preference.festivals: "Festivales",
}


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    def formatted(self, digits: int = 6) -> str:
        return f"{self.lat:.{digits}f}, {self.lng:.{digits}f}"


class SearchCriteria(BaseModel):
    """What the form sends. Field names match the webhook body."""

    location: Union[Coordinates, str]
    maxKm: int = Field(15, ge=1, le=100)
    maxBudget: float = Field(50, ge=0, le=1000)
    prefs: List[Preference] = Field(default_factory=list)

    @field_validator("prefs")
    @classmethod
    def _dedupe_prefs(cls, v: List[Preference]) -> List[Preference]:
        out: List[Preference] = []
        for p in v:
            if p not in out:
                out.append(p)
        return out

    def has_location(self) -> bool:
        if isinstance(self.location, Coordinates):
            return True
        return bool(self.location.strip())


def _number_or_none(v: Any) -> Optional[float]:
    # bool is an int subclass, never a score/price
    if isinstance(v, bool):
        return None
    if not isinstance(v, (int, float, str)):
        return None
    try:
        num = float(v)
    except (ValueError, OverflowError):
        return None
    return num if math.isfinite(num) else None


def _text_or_none(v: Any) -> Optional[str]:
    if isinstance(v, str) and v.strip():
        return v
    return None


class VenueResult(BaseModel):
    """
    One venue as returned by the webhook. Every field is optional and a field
    with an unexpected type is treated as absent, so building one never fails.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    type: Optional[str] = None
    score: Optional[float] = None
    distanceKm: Optional[float] = None
    # 0 means free, None means unknown
    price: Optional[float] = None
    address: Optional[str] = None
    url: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any):
        if isinstance(v, bool) or not isinstance(v, (int, str)) or v == "":
            return None
        return v

    @field_validator("score", "distanceKm", "price", mode="before")
    @classmethod
    def _coerce_number(cls, v: Any):
        return _number_or_none(v)

    @field_validator("name", "type", "address", "url", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any):
        return _text_or_none(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, v: Any):
        if not isinstance(v, list):
            return None
        return [t for t in v if isinstance(t, str)]

    @classmethod
    def from_raw(cls, raw: Any, index: int) -> "VenueResult":
        data = raw if isinstance(raw, dict) else {}
        venue = cls.model_validate(data)
        if venue.id is None:
            venue.id = index
        return venue


class SearchOutcome(BaseModel):
    """Either a list of venues (possibly empty) or an error message."""

    results: Optional[List[VenueResult]] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.results is None) == (self.error is None):
            raise ValueError("SearchOutcome needs exactly one of results or error")
        return self
