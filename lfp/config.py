"""Project configuration.

Loads user-defined catalog settings from catalog_config.json when available,
falling back to sensible defaults. Keep field names and endpoints centralized here.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- Endpoints ---

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
GEOCODER_USER_AGENT = "lfp-visualized/1.0"

# --- Dataset ---

DATASET_SOURCE = os.environ.get("LFP_DATASET") or str(_REPO_ROOT / "public" / "data" / "lfp.json")

# --- Record fields ---

NAME_FIELD = "Einrichtung"
ZONE_FIELD = "PLZ"
CITY_FIELD = "Ort"
STREET_FIELD = "Strasse"
CATEGORY_FIELD = "Eintritt"
LAT_FIELD = "Latitude"
LON_FIELD = "Longitude"
LINK_FIELD = "Homepage"
NOTE_FIELD = "Hinweis"

IDENTITY_SEPARATOR = "::"
MISSING_VALUE_TEXT = "undefined"

HIDDEN_BY_DEFAULT: List[str] = [LAT_FIELD, LON_FIELD]
LINK_SEPARATORS_PATTERN = r"[;,\n]+"
LINK_DEFAULT_SCHEME = "http://"

# Sentinel sort key for proximity ordering.
DISTANCE_SORT_KEY = "distance"
RADIUS_TOLERANCE_KM = 1e-9

# --- Labels ---

_DEFAULT_ENTRY_FEE_LABELS: Dict[str, str] = {
    "E": "Ermäßigter Eintritt",
    "F": "Freier Eintritt",
    "K": "Kostenloser Eintritt für Kinder",
}
ENTRY_FEE_LABELS: Dict[str, str] = dict(_DEFAULT_ENTRY_FEE_LABELS)

# --- Persistence ---

STORAGE_DB_PATH = os.environ.get("LFP_STORAGE_PATH") or "lfp_storage.db"
FAVORITES_KEY = "lfp:favorites:v1"

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20
HTTP_RETRY_MAX = 3
HTTP_BACKOFF_BASE = 0.5
HTTP_BACKOFF_MAX = 8.0

# --- Outputs ---

OUTPUT_DIR = "out"
DISTANCE_DECIMALS = 1


def load_catalog_config(path: Optional[str] = None) -> bool:
    """Load catalog configuration from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "catalog_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    globals_ref = globals()

    dataset = data.get("dataset")
    if dataset:
        globals_ref["DATASET_SOURCE"] = str(dataset)

    storage_path = data.get("storage_path")
    if storage_path:
        globals_ref["STORAGE_DB_PATH"] = str(storage_path)

    fields = data.get("fields", {})
    for key, name in (
        ("name", "NAME_FIELD"),
        ("zone", "ZONE_FIELD"),
        ("city", "CITY_FIELD"),
        ("street", "STREET_FIELD"),
        ("category", "CATEGORY_FIELD"),
        ("latitude", "LAT_FIELD"),
        ("longitude", "LON_FIELD"),
        ("links", "LINK_FIELD"),
        ("note", "NOTE_FIELD"),
    ):
        if fields.get(key):
            globals_ref[name] = str(fields[key])

    hidden = data.get("hidden_by_default")
    if hidden is not None:
        globals_ref["HIDDEN_BY_DEFAULT"] = [str(h) for h in hidden]
    elif fields.get("latitude") or fields.get("longitude"):
        globals_ref["HIDDEN_BY_DEFAULT"] = [globals_ref["LAT_FIELD"], globals_ref["LON_FIELD"]]

    labels = data.get("entry_fee_labels", {})
    if labels:
        merged = dict(_DEFAULT_ENTRY_FEE_LABELS)
        merged.update({str(k): str(v) for k, v in labels.items()})
        globals_ref["ENTRY_FEE_LABELS"] = merged

    geocoder = data.get("geocoder", {})
    if geocoder.get("url"):
        globals_ref["NOMINATIM_SEARCH_URL"] = str(geocoder["url"])
    if geocoder.get("user_agent"):
        globals_ref["GEOCODER_USER_AGENT"] = str(geocoder["user_agent"])

    http = data.get("http", {})
    if "timeout_seconds" in http:
        globals_ref["HTTP_TIMEOUT_SECONDS"] = int(http["timeout_seconds"])
    if "retry_max" in http:
        globals_ref["HTTP_RETRY_MAX"] = int(http["retry_max"])

    output_dir = data.get("output_dir")
    if output_dir:
        globals_ref["OUTPUT_DIR"] = str(output_dir)

    return True
