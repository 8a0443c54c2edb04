# main.py
# FastAPI app serving the CulturaCerca form page and a small JSON API

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

import config
from models import PREFERENCE_LABELS, VALIDATION_MESSAGE, Coordinates, Preference, SearchCriteria
from providers.geo import GeoFailureReason, GeoSuccess, PositionOptions, build_resolver
from providers.webhook import search_venues
from render import cards, render_page
from state import (
    TogglePreference,
    from_params,
    locate,
    reduce,
    submit,
)

app = FastAPI(title="CulturaCerca", version="0.1.0")

origins = [config.FRONTEND_LOCAL]
if config.FRONTEND_PROD:
    origins.append(config.FRONTEND_PROD)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# logging
logging.basicConfig(level=config.LOG_LEVEL)
log = logging.getLogger("cultura-cerca")

# one resolver per process so the fix cache (max age) is shared
resolver = build_resolver(
    config.DEVICE_LAT,
    config.DEVICE_LNG,
    config.DEVICE_PLACE,
    PositionOptions(
        high_accuracy=config.GEO_HIGH_ACCURACY,
        timeout_s=config.GEO_TIMEOUT_S,
        max_age_s=config.GEO_MAX_AGE_S,
    ),
)

GEO_STATUS = {
    GeoFailureReason.unsupported: 503,
    GeoFailureReason.denied: 403,
    GeoFailureReason.unavailable: 503,
    GeoFailureReason.timeout: 504,
    GeoFailureReason.unknown: 500,
}


# global JSON error handling
# - HTTPException -> { "error": <detail> }
# - any other exception -> { "error": "Server error" }
@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    log.warning("HTTP %s: %s", exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "Server error"})


@app.get("/", response_class=HTMLResponse)
async def form_page(
    location: str = "",
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    maxKm: Optional[float] = None,
    maxBudget: Optional[float] = None,
    prefs: List[str] = Query([]),
    action: Optional[str] = None,
    pref: Optional[str] = None,
):
    """
    The form is a plain GET form, every field comes back as a query param.
    action=search runs the search, action=locate resolves the device position,
    action=toggle flips one preference.
    """
    state = from_params(location, lat, lng, maxKm, maxBudget, prefs)

    if action == "locate":
        state = await locate(state, resolver)
    elif action == "search":
        state = await submit(state, search_venues)
    elif action == "toggle" and pref:
        try:
            state = reduce(state, TogglePreference(Preference(pref)))
        except ValueError:
            log.debug("ignoring unknown preference %r", pref)

    return HTMLResponse(render_page(state))


@app.post("/api/search")
async def api_search(req: SearchCriteria):
    """Same flow as the page, JSON in and out."""
    coords = req.location if isinstance(req.location, Coordinates) else None
    state = from_params(
        coords.formatted() if coords else req.location,
        coords.lat if coords else None,
        coords.lng if coords else None,
        req.maxKm,
        req.maxBudget,
        [p.value for p in req.prefs],
    )

    state = await submit(state, search_venues)
    if state.results is None:
        # blank location -> 400, webhook failure -> 502
        status = 400 if state.error == VALIDATION_MESSAGE else 502
        raise HTTPException(status_code=status, detail=state.error)

    return {
        "results": [v.model_dump(exclude_none=True) for v in state.results],
        "count": len(state.results),
        "cards": cards(state.results),
    }


@app.post("/api/geolocate")
async def api_geolocate():
    result = await resolver.resolve()
    if isinstance(result, GeoSuccess):
        return {
            "lat": result.coords.lat,
            "lng": result.coords.lng,
            "location": result.coords.formatted(),
        }
    raise HTTPException(status_code=GEO_STATUS[result.reason], detail=result.message)


@app.get("/api/preferences")
def preferences():
    return [{"id": p.value, "label": PREFERENCE_LABELS[p]} for p in Preference]


@app.get("/health")
def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.APP_HOST, port=config.APP_PORT)
