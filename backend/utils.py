# utils.py
# Helpers: response normalization, venue conversion, numeric clamping

from __future__ import annotations
import logging
from typing import Any, List
from models import VenueResult

log = logging.getLogger("cultura-cerca.normalize")


def normalize_results(data: Any) -> list:
    """
    Unwrap the webhook response into a flat list of raw venue items.

    Shapes handled:
      [{"results": [...], "fallback": ..., "debug": ...}]  -> inner list
      {"results": [...]}                                    -> that list
    Anything else is zero results. Never raises.
    """
    match data:
        case [{"results": list(items)}, *_]:
            log.debug("response shape: list-wrapped results (%d items)", len(items))
            return list(items)
        case {"results": list(items)}:
            log.debug("response shape: object results (%d items)", len(items))
            return list(items)
        case _:
            log.debug("response shape not recognized (%s), using empty list", type(data).__name__)
            return []


def to_venues(items: List[Any]) -> List[VenueResult]:
    """Build venue records; missing ids fall back to the position in the list."""
    return [VenueResult.from_raw(raw, i) for i, raw in enumerate(items)]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
