"""Query specification and the filter/sort engine behind both catalog views.

``apply_query`` runs four independent filter stages in a fixed order and then
a stable sort:

1. free text: case-insensitive substring of the name attribute
2. category: the category attribute is one of the selected values
3. radius: distance from the center is at most ``radius_km``
4. favorites: the record id is marked as favorite

Records with missing or ill-typed attributes are excluded by the stage that
needs the attribute, or sorted last; nothing here raises on record content.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, FrozenSet, Iterable, List, Literal, Mapping, Optional, Sequence

from . import config
from .geo import distance_to_record
from .identity import make_record_id
from .schema import display_text

logger = logging.getLogger(__name__)

SortDirection = Literal["asc", "desc"]
Record = Mapping[str, Any]
RecordPredicate = Callable[[Record], bool]


@dataclass(frozen=True)
class Center:
    lat: float
    lon: float


@dataclass(frozen=True)
class QuerySpec:
    search_text: str = ""
    selected_categories: FrozenSet[str] = field(default_factory=frozenset)
    favorite_only: bool = False
    center: Optional[Center] = None
    radius_km: Optional[float] = None
    sort_key: Optional[str] = None
    sort_dir: SortDirection = "asc"

    @property
    def radius_active(self) -> bool:
        return self.center is not None and self.radius_km is not None

    @property
    def distance_sort_active(self) -> bool:
        return self.sort_key == config.DISTANCE_SORT_KEY and self.center is not None

    def with_search_text(self, text: str) -> "QuerySpec":
        return replace(self, search_text=text or "")

    def with_category(self, value: str, selected: bool = True) -> "QuerySpec":
        categories = set(self.selected_categories)
        if selected:
            categories.add(value)
        else:
            categories.discard(value)
        return replace(self, selected_categories=frozenset(categories))

    def with_categories(self, values: Iterable[str]) -> "QuerySpec":
        return replace(self, selected_categories=frozenset(values))

    def with_favorite_only(self, enabled: bool) -> "QuerySpec":
        return replace(self, favorite_only=bool(enabled))

    def with_center(self, center: Optional[Center]) -> "QuerySpec":
        return replace(self, center=center)

    def with_radius(self, radius_km: Optional[float]) -> "QuerySpec":
        return replace(self, radius_km=radius_km)

    def clear_location(self) -> "QuerySpec":
        return replace(self, center=None, radius_km=None)

    def click_header(self, key: str) -> "QuerySpec":
        """Same key flips the direction, a new key sorts ascending by it."""
        if self.sort_key == key:
            return replace(self, sort_dir="desc" if self.sort_dir == "asc" else "asc")
        return replace(self, sort_key=key, sort_dir="asc")


def text_predicate(search_text: str) -> Optional[RecordPredicate]:
    if not search_text:
        return None
    needle = search_text.lower()

    def matches(record: Record) -> bool:
        return needle in display_text(record.get(config.NAME_FIELD)).lower()

    return matches


def category_predicate(selected: FrozenSet[str]) -> Optional[RecordPredicate]:
    if not selected:
        return None

    def matches(record: Record) -> bool:
        return display_text(record.get(config.CATEGORY_FIELD)) in selected

    return matches


def radius_predicate(center: Center, radius_km: float) -> RecordPredicate:
    limit = float(radius_km) + config.RADIUS_TOLERANCE_KM

    def matches(record: Record) -> bool:
        dist = distance_to_record(center, record)
        return dist is not None and dist <= limit

    return matches


def favorite_predicate(favorite_only: bool, favorites: Mapping[str, bool]) -> Optional[RecordPredicate]:
    if not favorite_only:
        return None

    def matches(record: Record) -> bool:
        return bool(favorites.get(make_record_id(record)))

    return matches


def build_predicates(spec: QuerySpec, favorites: Mapping[str, bool]) -> List[RecordPredicate]:
    stages = [
        text_predicate(spec.search_text),
        category_predicate(spec.selected_categories),
        radius_predicate(spec.center, spec.radius_km) if spec.radius_active else None,
        favorite_predicate(spec.favorite_only, favorites),
    ]
    return [p for p in stages if p is not None]


def distance_sort_key(center: Center) -> Callable[[Record], float]:
    def key(record: Record) -> float:
        dist = distance_to_record(center, record)
        if dist is None or math.isnan(dist):
            return math.inf
        return dist

    return key


def attribute_sort_key(name: str) -> Callable[[Record], str]:
    def key(record: Record) -> str:
        return display_text(record.get(name))

    return key


def sort_records(records: List[Record], spec: QuerySpec) -> List[Record]:
    if not spec.sort_key:
        return records
    if spec.sort_key == config.DISTANCE_SORT_KEY:
        if spec.center is None:
            return records
        key: Callable[[Record], Any] = distance_sort_key(spec.center)
    else:
        key = attribute_sort_key(spec.sort_key)
    # list.sort stays stable with reverse=True, ties keep filtered order
    records.sort(key=key, reverse=spec.sort_dir == "desc")
    return records


def filter_favorites(records: Iterable[Record], favorites: Mapping[str, bool]) -> List[Record]:
    return [r for r in records if favorites.get(make_record_id(r))]


def apply_query(
    records: Sequence[Record],
    spec: Optional[QuerySpec] = None,
    favorites: Optional[Mapping[str, bool]] = None,
) -> List[Record]:
    spec = spec or QuerySpec()
    favorites = favorites or {}
    result: List[Record] = [r for r in records if isinstance(r, Mapping)]
    for predicate in build_predicates(spec, favorites):
        result = [r for r in result if predicate(r)]
    sort_records(result, spec)
    logger.debug(
        "Query matched %s of %s records (sort=%s %s)",
        len(result),
        len(records),
        spec.sort_key,
        spec.sort_dir,
    )
    return result
