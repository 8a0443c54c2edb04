# state.py
# Form state record + reducer. Every UI event maps to one pure transition.

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Union

from models import (
    VALIDATION_MESSAGE,
    Coordinates,
    Preference,
    SearchCriteria,
    SearchOutcome,
    VenueResult,
)
from utils import clamp
from providers.geo import GeoSuccess, LocationResolver

log = logging.getLogger("cultura-cerca.state")

KM_RANGE = (1, 100)
BUDGET_RANGE = (0, 1000)


@dataclass(frozen=True)
class FormState:
    location: str = ""
    coordinates: Optional[Coordinates] = None
    max_km: int = 15
    max_budget: Union[int, float] = 50
    prefs: tuple[Preference, ...] = ()
    loading: bool = False
    geo_loading: bool = False
    # None = no search yet (or last one failed), [] = searched, nothing found
    results: Optional[List[VenueResult]] = None
    error: str = ""


# ---- events ----

@dataclass(frozen=True)
class LocationEdited:
    text: str


@dataclass(frozen=True)
class MaxKmChanged:
    value: float


@dataclass(frozen=True)
class BudgetChanged:
    value: float


@dataclass(frozen=True)
class TogglePreference:
    pref: Preference


@dataclass(frozen=True)
class GeolocationRequested:
    pass


@dataclass(frozen=True)
class GeolocationSucceeded:
    coords: Coordinates


@dataclass(frozen=True)
class GeolocationFailed:
    message: str


@dataclass(frozen=True)
class SubmitRequested:
    pass


@dataclass(frozen=True)
class SearchCompleted:
    outcome: SearchOutcome


# ---- transitions ----

def _location_edited(state: FormState, ev: LocationEdited) -> FormState:
    # typed text replaces any resolved fix
    return replace(state, location=ev.text, coordinates=None)


def _max_km_changed(state: FormState, ev: MaxKmChanged) -> FormState:
    if not math.isfinite(ev.value):
        return state
    return replace(state, max_km=int(clamp(round(ev.value), *KM_RANGE)))


def _budget_changed(state: FormState, ev: BudgetChanged) -> FormState:
    if not math.isfinite(ev.value):
        return state
    value = clamp(ev.value, *BUDGET_RANGE)
    if float(value).is_integer():
        value = int(value)
    return replace(state, max_budget=value)


def _toggle_preference(state: FormState, ev: TogglePreference) -> FormState:
    if ev.pref in state.prefs:
        prefs = tuple(p for p in state.prefs if p != ev.pref)
    else:
        prefs = state.prefs + (ev.pref,)
    return replace(state, prefs=prefs)


def _geolocation_requested(state: FormState, ev: GeolocationRequested) -> FormState:
    return replace(state, geo_loading=True, error="")


def _geolocation_succeeded(state: FormState, ev: GeolocationSucceeded) -> FormState:
    return replace(
        state,
        coordinates=ev.coords,
        location=ev.coords.formatted(),
        geo_loading=False,
    )


def _geolocation_failed(state: FormState, ev: GeolocationFailed) -> FormState:
    return replace(state, error=ev.message, geo_loading=False)


def _submit_requested(state: FormState, ev: SubmitRequested) -> FormState:
    if state.loading:
        # one request in flight at a time
        return state
    if not state.location.strip() and state.coordinates is None:
        return replace(state, error=VALIDATION_MESSAGE)
    return replace(state, loading=True, error="", results=None)


def _search_completed(state: FormState, ev: SearchCompleted) -> FormState:
    outcome = ev.outcome
    return replace(
        state,
        loading=False,
        results=outcome.results,
        error=outcome.error or "",
    )


TRANSITIONS: dict[type, Callable[[FormState, object], FormState]] = {
    LocationEdited: _location_edited,
    MaxKmChanged: _max_km_changed,
    BudgetChanged: _budget_changed,
    TogglePreference: _toggle_preference,
    GeolocationRequested: _geolocation_requested,
    GeolocationSucceeded: _geolocation_succeeded,
    GeolocationFailed: _geolocation_failed,
    SubmitRequested: _submit_requested,
    SearchCompleted: _search_completed,
}


def reduce(state: FormState, event: object) -> FormState:
    try:
        transition = TRANSITIONS[type(event)]
    except KeyError:
        raise TypeError(f"unknown form event: {type(event).__name__}") from None
    return transition(state, event)


def criteria(state: FormState) -> SearchCriteria:
    """Criteria sent on submit. Coordinates win over the typed text."""
    location: Union[Coordinates, str] = (
        state.coordinates if state.coordinates is not None else state.location.strip()
    )
    return SearchCriteria(
        location=location,
        maxKm=state.max_km,
        maxBudget=state.max_budget,
        prefs=list(state.prefs),
    )


# ---- orchestration ----

SearchFn = Callable[[SearchCriteria], Awaitable[SearchOutcome]]


async def submit(state: FormState, search: SearchFn) -> FormState:
    """Run one search round trip: submit -> request -> completed."""
    pending = reduce(state, SubmitRequested())
    if not pending.loading or pending is state:
        # blocked by validation or by a request already in flight
        return pending
    outcome = await search(criteria(pending))
    return reduce(pending, SearchCompleted(outcome))


async def locate(state: FormState, resolver: LocationResolver) -> FormState:
    """Resolve the device position and fold the result into the state."""
    pending = reduce(state, GeolocationRequested())
    result = await resolver.resolve()
    if isinstance(result, GeoSuccess):
        return reduce(pending, GeolocationSucceeded(result.coords))
    return reduce(pending, GeolocationFailed(result.message))


def from_params(
    location: str = "",
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    max_km: Optional[float] = None,
    max_budget: Optional[float] = None,
    prefs: Optional[List[str]] = None,
) -> FormState:
    """
    Rebuild form state from submitted page fields by replaying edit events.
    Hidden lat/lng only count while the text still shows those coordinates.
    """
    state = reduce(FormState(), LocationEdited(location or ""))
    if lat is not None and lng is not None:
        coords = Coordinates(lat=lat, lng=lng)
        if state.location.strip() == coords.formatted():
            state = reduce(state, GeolocationSucceeded(coords))
    if max_km is not None:
        state = reduce(state, MaxKmChanged(max_km))
    if max_budget is not None:
        state = reduce(state, BudgetChanged(max_budget))
    for raw in prefs or []:
        try:
            pref = Preference(raw)
        except ValueError:
            log.debug("ignoring unknown preference %r", raw)
            continue
        if pref not in state.prefs:
            state = reduce(state, TogglePreference(pref))
    return state
