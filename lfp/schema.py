"""Attribute discovery over heterogeneous records."""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from . import config

AttributeValue = Union[str, int, float, bool, None]


def attribute_value(record: Mapping[str, Any], name: str) -> AttributeValue:
    value = record.get(name)
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    # nested payloads are shown as text
    return str(value)


def display_text(value: Any) -> str:
    """String coercion shared by filters, sorting and rendering (None -> "")."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def discover_columns(records: Iterable[Mapping[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for record in records:
        for key in record.keys():
            if key not in seen:
                seen[key] = None
    return list(seen)


def discover_categorical_values(
    records: Iterable[Mapping[str, Any]], attribute: Optional[str] = None
) -> List[str]:
    attribute = attribute or config.CATEGORY_FIELD
    values = set()
    for record in records:
        raw = record.get(attribute)
        if not raw:
            continue
        text = display_text(raw)
        if text:
            values.add(text)
    return sorted(values)


class ColumnVisibility:
    """Per-column visibility flags, seeded once from the first non-empty schema."""

    def __init__(self, hidden_by_default: Optional[Iterable[str]] = None) -> None:
        self.hidden_by_default = list(
            config.HIDDEN_BY_DEFAULT if hidden_by_default is None else hidden_by_default
        )
        self._flags: Dict[str, bool] = {}

    @property
    def seeded(self) -> bool:
        return bool(self._flags)

    def seed(self, columns: Iterable[str]) -> bool:
        """Seed defaults if nothing is set yet. Returns True when seeding happened."""
        columns = list(columns)
        if not columns or self._flags:
            return False
        flags = {c: True for c in columns}
        for name in self.hidden_by_default:
            if name in flags:
                flags[name] = False
        self._flags = flags
        return True

    def is_visible(self, name: str) -> bool:
        return bool(self._flags.get(name))

    def toggle(self, name: str) -> bool:
        self._flags[name] = not self._flags.get(name, False)
        return self._flags[name]

    def set_visible(self, name: str, visible: bool) -> None:
        self._flags[name] = bool(visible)

    def visible_columns(self, columns: Iterable[str]) -> List[str]:
        return [c for c in columns if self.is_visible(c)]

    def as_dict(self) -> Dict[str, bool]:
        return dict(self._flags)
