"""Table rows and map markers built from query results."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from . import config
from .geo import distance_to_record, record_coords
from .identity import make_record_id
from .labels import explain_entry_fee
from .query import Center, filter_favorites
from .schema import ColumnVisibility, display_text

FAVORITE_COLUMN = "favorite"
DISTANCE_COLUMN = "distance"
FAVORITE_LABEL = "✭"
DISTANCE_LABEL = "Entfernung (km)"
STAR_ON = "★"
STAR_OFF = "☆"


@dataclass(frozen=True)
class Link:
    text: str
    href: str


@dataclass(frozen=True)
class Cell:
    text: str
    links: Tuple[Link, ...] = ()

    def plain(self) -> str:
        if self.links:
            return "\n".join(link.href for link in self.links)
        return self.text


@dataclass(frozen=True)
class Row:
    """One table row.

    Record attributes live in ``cells``. The computed favorite and distance
    cells are kept apart so a record attribute of the same name never
    replaces them.
    """

    record_id: str
    cells: Dict[str, Cell]
    favorite: Optional[Cell] = None
    distance: Optional[Cell] = None

    def computed_cells(self) -> List[Tuple[str, Cell]]:
        out: List[Tuple[str, Cell]] = []
        if self.favorite is not None:
            out.append((FAVORITE_COLUMN, self.favorite))
        if self.distance is not None:
            out.append((DISTANCE_COLUMN, self.distance))
        return out


@dataclass(frozen=True)
class Popup:
    title: str
    favorite: bool
    lines: Tuple[str, ...] = ()
    link: Optional[Link] = None
    note: str = ""


@dataclass(frozen=True)
class Marker:
    record_id: str
    lat: float
    lon: float
    favorite: bool
    popup: Popup
    properties: Dict[str, Any] = field(default_factory=dict)


def split_links(raw: Any) -> List[str]:
    if raw is None or raw == "":
        return []
    parts = re.split(config.LINK_SEPARATORS_PATTERN, display_text(raw))
    return [p.strip() for p in parts if p.strip()]


def link_href(link: str) -> str:
    if link.startswith("http"):
        return link
    return f"{config.LINK_DEFAULT_SCHEME}{link}"


def make_links(raw: Any) -> Tuple[Link, ...]:
    return tuple(Link(text=p, href=link_href(p)) for p in split_links(raw))


def format_distance(center: Center, record: Mapping[str, Any]) -> str:
    dist = distance_to_record(center, record)
    if dist is None:
        return ""
    return f"{dist:.{config.DISTANCE_DECIMALS}f}"


def project_cell(name: str, value: Any) -> Cell:
    if name == config.LINK_FIELD and value:
        links = make_links(value)
        return Cell(text=display_text(value), links=links)
    return Cell(text=display_text(value))


def project_rows(
    records: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    visibility: ColumnVisibility,
    favorites: Optional[Mapping[str, bool]] = None,
    center: Optional[Center] = None,
) -> List[Row]:
    visible = visibility.visible_columns(columns)
    rows: List[Row] = []
    for record in records:
        record_id = make_record_id(record)
        favorite = None
        if favorites is not None:
            favorite = Cell(text=STAR_ON if favorites.get(record_id) else STAR_OFF)
        distance = None
        if center is not None:
            distance = Cell(text=format_distance(center, record))
        cells = {name: project_cell(name, record.get(name)) for name in visible}
        rows.append(Row(record_id=record_id, cells=cells, favorite=favorite, distance=distance))
    return rows


def header_labels(
    columns: Sequence[str],
    visibility: ColumnVisibility,
    sort_key: Optional[str] = None,
    sort_dir: str = "asc",
    with_favorites: bool = True,
    with_distance: bool = False,
) -> List[str]:
    arrow = "▲" if sort_dir == "asc" else "▼"
    distance_sorted = sort_key == config.DISTANCE_SORT_KEY
    labels: List[str] = []
    if with_favorites:
        labels.append(FAVORITE_LABEL)
    if with_distance:
        labels.append(f"{DISTANCE_LABEL} {arrow}" if distance_sorted else DISTANCE_LABEL)
    for name in visibility.visible_columns(columns):
        # a record attribute named like the distance key is never the sort column
        if name == sort_key and not distance_sorted:
            labels.append(f"{name} {arrow}")
        else:
            labels.append(name)
    return labels


def build_popup(record: Mapping[str, Any], favorite: bool) -> Popup:
    street = display_text(record.get(config.STREET_FIELD))
    zone_city = " ".join(
        [display_text(record.get(config.ZONE_FIELD)), display_text(record.get(config.CITY_FIELD))]
    )
    fee = display_text(record.get(config.CATEGORY_FIELD))
    lines = (street, zone_city, f"{config.CATEGORY_FIELD}: {fee}")
    links = make_links(record.get(config.LINK_FIELD))
    return Popup(
        title=display_text(record.get(config.NAME_FIELD)),
        favorite=favorite,
        lines=lines,
        link=links[0] if links else None,
        note=display_text(record.get(config.NOTE_FIELD)),
    )


def project_markers(
    records: Iterable[Mapping[str, Any]],
    favorites: Mapping[str, bool],
    favorite_only: bool = False,
) -> List[Marker]:
    if favorite_only:
        records = filter_favorites(records, favorites)
    markers: List[Marker] = []
    for record in records:
        coords = record_coords(record)
        if coords is None:
            continue
        record_id = make_record_id(record)
        favorite = bool(favorites.get(record_id))
        markers.append(
            Marker(
                record_id=record_id,
                lat=coords[0],
                lon=coords[1],
                favorite=favorite,
                popup=build_popup(record, favorite),
                properties={
                    "entry_fee_label": explain_entry_fee(record.get(config.CATEGORY_FIELD)),
                },
            )
        )
    return markers


def markers_to_geojson(markers: Iterable[Marker]) -> Dict[str, Any]:
    features = []
    for marker in markers:
        popup = marker.popup
        properties: Dict[str, Any] = {
            "id": marker.record_id,
            "title": popup.title,
            "favorite": marker.favorite,
            "lines": list(popup.lines),
            "link": popup.link.href if popup.link else None,
            "link_text": popup.link.text if popup.link else None,
            "note": popup.note,
        }
        properties.update(marker.properties)
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [marker.lon, marker.lat]},
                "properties": properties,
            }
        )
    return {"type": "FeatureCollection", "features": features}
