# providers/geo.py
# device position lookup with timeout, fix cache and per-reason error messages

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Union

import httpx
from models import Coordinates

log = logging.getLogger("cultura-cerca.geo")

# W3C GeolocationPositionError codes
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3


class GeoFailureReason(str, Enum):
    unsupported = "unsupported"
    denied = "denied"
    unavailable = "unavailable"
    timeout = "timeout"
    unknown = "unknown"


MESSAGES = {
    GeoFailureReason.unsupported: "Geolocalización no es compatible con este navegador",
    GeoFailureReason.denied: "Permiso de ubicación denegado",
    GeoFailureReason.unavailable: "Ubicación no disponible",
    GeoFailureReason.timeout: "Tiempo de espera agotado",
    GeoFailureReason.unknown: "Error obteniendo ubicación",
}

_REASON_BY_CODE = {
    PERMISSION_DENIED: GeoFailureReason.denied,
    POSITION_UNAVAILABLE: GeoFailureReason.unavailable,
    TIMEOUT: GeoFailureReason.timeout,
}


class PositionError(Exception):
    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"position error {code}")
        self.code = code


@dataclass(frozen=True)
class PositionOptions:
    # False lets nominatim answer with a town-level point
    high_accuracy: bool = True
    timeout_s: float = 10.0
    max_age_s: float = 300.0


@dataclass(frozen=True)
class Position:
    coords: Coordinates
    timestamp: float


@dataclass(frozen=True)
class GeoSuccess:
    coords: Coordinates


@dataclass(frozen=True)
class GeoFailure:
    reason: GeoFailureReason

    @property
    def message(self) -> str:
        return MESSAGES[self.reason]


GeoResult = Union[GeoSuccess, GeoFailure]


class PositionProvider(Protocol):
    async def get_current_position(self, options: PositionOptions) -> Position: ...


class FixedPositionProvider:
    """A device with a known, configured position."""

    def __init__(self, lat: float, lng: float, clock: Callable[[], float] = time.time):
        self.coords = Coordinates(lat=lat, lng=lng)
        self._clock = clock

    async def get_current_position(self, options: PositionOptions) -> Position:
        return Position(coords=self.coords, timestamp=self._clock())


NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
HEADERS = {
    "User-Agent": "CulturaCerca/0.1",
    "Accept-Language": "es",
    "Accept": "application/json",
}


class NominatimPositionProvider:
    """
    Device position taken from a configured place name (home address, city)
    geocoded through nominatim. No key needed.
    """

    def __init__(self, place: str, clock: Callable[[], float] = time.time):
        self.place = place
        self._clock = clock

    async def get_current_position(self, options: PositionOptions) -> Position:
        params = {"format": "jsonv2", "q": self.place, "limit": 1}
        if not options.high_accuracy:
            # coarse fix: settle for the enclosing town
            params["featureType"] = "settlement"
        try:
            async with httpx.AsyncClient(timeout=options.timeout_s, headers=HEADERS) as client:
                r = await client.get(NOMINATIM_URL, params=params)
        except httpx.TimeoutException as e:
            raise PositionError(TIMEOUT, str(e)) from e
        except httpx.HTTPError as e:
            raise PositionError(POSITION_UNAVAILABLE, str(e)) from e
        if r.status_code == 403:
            raise PositionError(PERMISSION_DENIED, "nominatim refused the request")
        if r.status_code != 200:
            raise PositionError(POSITION_UNAVAILABLE, f"nominatim status {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise PositionError(POSITION_UNAVAILABLE, f"nominatim sent a non-JSON body: {e}") from e
        if not data:
            raise PositionError(POSITION_UNAVAILABLE, f"no match for {self.place!r}")
        try:
            coords = Coordinates(lat=float(data[0]["lat"]), lng=float(data[0]["lon"]))
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise PositionError(POSITION_UNAVAILABLE, f"unusable nominatim match: {e!r}") from e
        return Position(coords=coords, timestamp=self._clock())


class LocationResolver:
    """
    Asks the provider for the current position. Enforces the timeout itself
    and reuses a fix that is at most max_age_s old. Never raises for device
    failures, returns GeoFailure instead.
    """

    def __init__(
        self,
        provider: Optional[PositionProvider],
        options: PositionOptions = PositionOptions(),
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.options = options
        self._clock = clock
        self._last: Optional[Position] = None

    def _cached(self) -> Optional[Position]:
        if self._last is None:
            return None
        if self._clock() - self._last.timestamp > self.options.max_age_s:
            return None
        return self._last

    async def resolve(self) -> GeoResult:
        if self.provider is None:
            log.info("geolocation requested but no position provider configured")
            return GeoFailure(GeoFailureReason.unsupported)

        cached = self._cached()
        if cached:
            return GeoSuccess(cached.coords)

        try:
            pos = await asyncio.wait_for(
                self.provider.get_current_position(self.options),
                timeout=self.options.timeout_s,
            )
        except asyncio.TimeoutError:
            log.warning("geolocation timed out after %ss", self.options.timeout_s)
            return GeoFailure(GeoFailureReason.timeout)
        except PositionError as e:
            reason = _REASON_BY_CODE.get(e.code, GeoFailureReason.unknown)
            log.warning("geolocation failed (%s): %s", reason.value, e)
            return GeoFailure(reason)

        self._last = pos
        return GeoSuccess(pos.coords)

    def start(self) -> "asyncio.Task[GeoResult]":
        """Run resolve() as a task the caller may cancel."""
        return asyncio.ensure_future(self.resolve())


def build_resolver(
    lat: Optional[float],
    lng: Optional[float],
    place: str,
    options: PositionOptions,
) -> LocationResolver:
    provider: Optional[PositionProvider] = None
    if lat is not None and lng is not None:
        provider = FixedPositionProvider(lat, lng)
    elif place:
        provider = NominatimPositionProvider(place)
    return LocationResolver(provider, options)
