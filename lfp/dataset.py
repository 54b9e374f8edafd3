"""Catalog dataset loading from a local JSON file or an http(s) URL."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from .http import HttpClient
from .outcome import DegradeReason, Outcome

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def normalize_payload(payload: Any) -> Outcome[List[Dict[str, Any]]]:
    if isinstance(payload, dict):
        for key in ("records", "items"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        return Outcome.fallback(
            [], DegradeReason.MALFORMED_RECORD, f"expected a list of records, got {type(payload).__name__}"
        )
    records = [dict(item) for item in payload if isinstance(item, dict)]
    dropped = len(payload) - len(records)
    if dropped:
        return Outcome.fallback(records, DegradeReason.MALFORMED_RECORD, f"dropped {dropped} non-object entries")
    return Outcome.success(records)


def load_records_outcome(source: str, http_client: Optional[HttpClient] = None) -> Outcome[List[Dict[str, Any]]]:
    if is_url(source):
        client = http_client or HttpClient.from_config()
        try:
            payload = client.get_json(source)
        except (requests.RequestException, ValueError, RuntimeError) as exc:
            return Outcome.fallback([], DegradeReason.NETWORK_FAILURE, str(exc))
        return normalize_payload(payload)

    path = Path(source).expanduser()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        return Outcome.fallback([], DegradeReason.NETWORK_FAILURE, str(exc))
    except ValueError as exc:
        return Outcome.fallback([], DegradeReason.MALFORMED_RECORD, f"invalid JSON: {exc}")
    return normalize_payload(payload)


def load_records(source: str, http_client: Optional[HttpClient] = None) -> List[Dict[str, Any]]:
    """Load catalog records; any failure yields the records that could be read (possibly none)."""
    outcome = load_records_outcome(source, http_client=http_client)
    if outcome.degraded:
        logger.warning("Dataset %s degraded (%s): %s", source, outcome.reason.value, outcome.detail)
    logger.info("Loaded %s records from %s", len(outcome.value), source)
    return outcome.value
