"""Content-based record identifiers."""
from __future__ import annotations

from typing import Any, Mapping

from . import config


def _identity_part(value: Any) -> str:
    if value is None:
        return config.MISSING_VALUE_TEXT
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def make_record_id(record: Mapping[str, Any]) -> str:
    """Derive the favorite/list key from the zone code and the name.

    Records sharing both fields get the same id.
    """
    zone = _identity_part(record.get(config.ZONE_FIELD))
    name = _identity_part(record.get(config.NAME_FIELD))
    return f"{zone}{config.IDENTITY_SEPARATOR}{name}"
