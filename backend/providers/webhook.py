# providers/webhook.py
# CulturaCerca search webhook. one POST per submit, no retries

import json
import logging
from typing import Optional

import httpx
from config import WEBHOOK_URL
from models import VALIDATION_MESSAGE, Coordinates, SearchCriteria, SearchOutcome
from utils import normalize_results, to_venues

log = logging.getLogger("cultura-cerca.webhook")

HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": "CulturaCerca/0.1",
    "Accept": "application/json",
}


def _number(v: float):
    # 50.0 goes out as 50
    return int(v) if float(v).is_integer() else v


def build_payload(criteria: SearchCriteria) -> dict:
    """Request body in the shape the n8n flow expects."""
    if isinstance(criteria.location, Coordinates):
        location = {"lat": criteria.location.lat, "lng": criteria.location.lng}
    else:
        location = criteria.location.strip()
    return {
        "location": location,
        "maxKm": criteria.maxKm,
        "maxBudget": _number(criteria.maxBudget),
        "prefs": [p.value for p in criteria.prefs],
    }


def encode_payload(criteria: SearchCriteria) -> bytes:
    body = json.dumps(build_payload(criteria), separators=(",", ":"), ensure_ascii=False)
    return body.encode("utf-8")


async def search_venues(
    criteria: SearchCriteria,
    client: Optional[httpx.AsyncClient] = None,
    url: str = WEBHOOK_URL,
) -> SearchOutcome:
    """
    Send the criteria to the webhook and normalize what comes back.
    Never raises for upstream problems: the outcome carries the message.
    """
    if not criteria.has_location():
        return SearchOutcome(error=VALIDATION_MESSAGE)

    body = encode_payload(criteria)
    try:
        if client is None:
            # no timeout, same as a plain browser fetch
            async with httpx.AsyncClient(timeout=None, headers=HEADERS) as own:
                r = await own.post(url, content=body)
        else:
            r = await client.post(url, content=body, headers=HEADERS)
    except httpx.HTTPError as e:
        msg = str(e) or type(e).__name__
        log.warning("webhook transport error: %s", msg)
        return SearchOutcome(error=msg)

    if not r.is_success:
        log.warning("webhook HTTP %s: %s", r.status_code, r.text[:400])
        return SearchOutcome(error=f"Error {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        log.warning("webhook returned non-JSON body: %s", e)
        return SearchOutcome(error=str(e))

    items = normalize_results(data)
    log.info("webhook %s -> %s, %d results", url, r.status_code, len(items))
    return SearchOutcome(results=to_venues(items))
