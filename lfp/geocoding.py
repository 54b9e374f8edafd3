"""Place-name lookup against Nominatim with a local result cache."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from . import config
from .http import HttpClient
from .outcome import DegradeReason, Outcome
from .query import Center
from .storage import KeyValueStore, make_geocode_cache_key

logger = logging.getLogger(__name__)


def build_search_params(query: str) -> Dict[str, Any]:
    return {"format": "json", "q": query, "limit": 1}


def parse_geocode_response(response: Any) -> Optional[Center]:
    """First result of a Nominatim search payload, or None."""
    if not isinstance(response, list) or not response:
        return None
    first = response[0]
    if not isinstance(first, dict):
        return None
    try:
        lat = float(first.get("lat"))
        lon = float(first.get("lon"))
    except (TypeError, ValueError):
        return None
    return Center(lat=lat, lon=lon)


class NominatimGeocoder:
    def __init__(
        self,
        http_client: HttpClient,
        cache: Optional[KeyValueStore] = None,
        no_cache: bool = False,
        url: Optional[str] = None,
    ) -> None:
        self.http = http_client
        self.cache = cache
        self.no_cache = no_cache
        self.url = url or config.NOMINATIM_SEARCH_URL

    def geocode_outcome(self, query: str) -> Outcome[Optional[Center]]:
        query = (query or "").strip()
        if not query:
            return Outcome.fallback(None, DegradeReason.NO_GEOCODE_MATCH, "empty query")

        key = make_geocode_cache_key(self.url, query)
        use_cache = self.cache is not None and not self.no_cache
        response: Any = None
        if use_cache:
            try:
                response = self.cache.get_geocode_cache(key)
            except Exception as exc:
                logger.warning("Geocode cache read failed: %s", exc)
                response = None

        if response is None:
            try:
                response = self.http.get_json(self.url, params=build_search_params(query))
            except (requests.RequestException, ValueError, RuntimeError) as exc:
                return Outcome.fallback(None, DegradeReason.NETWORK_FAILURE, str(exc))
            center = parse_geocode_response(response)
            if use_cache and center is not None:
                try:
                    self.cache.set_geocode_cache(key, query, response)
                except Exception as exc:
                    logger.warning("Geocode cache write failed: %s", exc)
        else:
            center = parse_geocode_response(response)

        if center is None:
            return Outcome.fallback(None, DegradeReason.NO_GEOCODE_MATCH, query)
        return Outcome.success(center)

    def geocode(self, query: str) -> Optional[Center]:
        outcome = self.geocode_outcome(query)
        if outcome.reason is DegradeReason.NETWORK_FAILURE:
            logger.warning("Geocoding failed for %r: %s", query, outcome.detail)
        elif outcome.reason is DegradeReason.NO_GEOCODE_MATCH:
            logger.info("No geocoding match for %r", query)
        return outcome.value
