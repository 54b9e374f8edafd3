"""CLI entrypoint."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv as _load_dotenv

from lfp import config
from lfp.dataset import load_records
from lfp.favorites import FavoriteStore
from lfp.geocoding import NominatimGeocoder
from lfp.http import HttpClient
from lfp.labels import explain_entry_fee
from lfp.projection import header_labels, markers_to_geojson, project_markers, project_rows
from lfp.query import Center, QuerySpec, apply_query
from lfp.reporting import (
    ensure_dir,
    render_table,
    write_json_object,
    write_rows_csv,
    write_rows_json,
)
from lfp.schema import ColumnVisibility, discover_categorical_values, discover_columns
from lfp.storage import KeyValueStore

logger = logging.getLogger("run")


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    _load_dotenv(dotenv_path=env_path, override=False)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browse the LFP attraction catalog")
    parser.add_argument("--dataset", type=str, default=None, help="Path or URL of the catalog JSON")
    parser.add_argument("--storage-path", type=str, default=None, help="SQLite file for favorites and geocode cache")
    parser.add_argument("--search", type=str, default="", help="Case-insensitive name filter")
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        help="Entry-fee code to include (repeatable; none = all)",
    )
    parser.add_argument("--favorites-only", action="store_true", help="Only list favorites")
    parser.add_argument("--place", type=str, default=None, help="City or postal code to search around")
    parser.add_argument("--center-lat", type=float, default=None)
    parser.add_argument("--center-lon", type=float, default=None)
    parser.add_argument("--radius-km", type=float, default=None)
    parser.add_argument("--sort", type=str, default=None, help='Column to sort by, or "distance"')
    parser.add_argument("--desc", action="store_true", help="Sort descending")
    parser.add_argument("--hide-column", action="append", default=[])
    parser.add_argument("--show-column", action="append", default=[])
    parser.add_argument("--list-columns", action="store_true", help="Print discovered columns and exit")
    parser.add_argument("--list-categories", action="store_true", help="Print entry-fee codes and exit")
    parser.add_argument(
        "--toggle-favorite",
        action="append",
        default=[],
        metavar="ID",
        help='Toggle a favorite by id ("PLZ::Einrichtung"), repeatable',
    )
    parser.add_argument("--markers", action="store_true", help="Write map markers as GeoJSON")
    parser.add_argument(
        "--map-favorites-only",
        action="store_true",
        help="Restrict map markers to favorites",
    )
    parser.add_argument("--format", choices=["table", "csv", "json"], default="table")
    parser.add_argument("--out", type=str, default=None)
    parser.add_argument("--no-cache", action="store_true", help="Bypass the geocode cache")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def resolve_center(
    args: argparse.Namespace, geocoder: Optional[NominatimGeocoder]
) -> Optional[Center]:
    if args.center_lat is not None and args.center_lon is not None:
        return Center(lat=args.center_lat, lon=args.center_lon)
    if args.place and geocoder is not None:
        center = geocoder.geocode(args.place)
        if center is None:
            print(f"Could not locate place: {args.place}", file=sys.stderr)
        return center
    return None


def build_query(args: argparse.Namespace, center: Optional[Center]) -> QuerySpec:
    spec = (
        QuerySpec()
        .with_search_text(args.search or "")
        .with_categories(c for c in args.category if c)
        .with_favorite_only(args.favorites_only)
        .with_center(center)
        .with_radius(args.radius_km)
    )
    if args.sort:
        spec = spec.click_header(args.sort)
        if args.desc:
            spec = spec.click_header(args.sort)
    return spec


def build_visibility(columns: List[str], args: argparse.Namespace) -> ColumnVisibility:
    visibility = ColumnVisibility()
    visibility.seed(columns)
    for name in args.hide_column:
        visibility.set_visible(name, False)
    for name in args.show_column:
        visibility.set_visible(name, True)
    return visibility


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    config.load_catalog_config()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    dataset = args.dataset or os.environ.get("LFP_DATASET") or config.DATASET_SOURCE
    storage_path = args.storage_path or os.environ.get("LFP_STORAGE_PATH") or config.STORAGE_DB_PATH

    http_client = HttpClient.from_config()
    records = load_records(dataset, http_client=http_client)
    columns = discover_columns(records)

    if args.list_columns:
        for name in columns:
            print(name)
        return 0
    if args.list_categories:
        for code in discover_categorical_values(records, config.CATEGORY_FIELD):
            print(f"{code}\t{explain_entry_fee(code)}")
        return 0

    try:
        storage: Optional[KeyValueStore] = KeyValueStore(storage_path)
    except Exception as exc:
        logger.warning("Storage unavailable at %s: %s", storage_path, exc)
        storage = None

    store = FavoriteStore(storage)
    try:
        store.load()
        for record_id in args.toggle_favorite:
            store.toggle(record_id)
            state = "added to" if store.is_favorite(record_id) else "removed from"
            print(f"{record_id} {state} favorites")
        store.flush()
        favorites: Dict[str, bool] = dict(store.favorites)

        geocoder = NominatimGeocoder(http_client, cache=storage, no_cache=args.no_cache)
        center = resolve_center(args, geocoder)
        spec = build_query(args, center)
        results = apply_query(records, spec, favorites)

        visibility = build_visibility(columns, args)
        rows = project_rows(results, columns, visibility, favorites=favorites, center=spec.center)

        if args.out:
            ensure_dir(args.out)
            write_rows_csv(os.path.join(args.out, "results.csv"), rows)
            write_rows_json(os.path.join(args.out, "results.json"), rows)
            if args.markers:
                markers = project_markers(results, favorites, favorite_only=args.map_favorites_only)
                write_json_object(os.path.join(args.out, "markers.geojson"), markers_to_geojson(markers))
            print(f"Done. {len(rows)} of {len(records)} attractions written to {args.out}")
        elif args.format == "csv" or args.format == "json":
            ensure_dir(config.OUTPUT_DIR)
            path = os.path.join(config.OUTPUT_DIR, f"results.{args.format}")
            if args.format == "csv":
                write_rows_csv(path, rows)
            else:
                write_rows_json(path, rows)
            print(f"Done. {len(rows)} of {len(records)} attractions written to {path}")
        else:
            headers = header_labels(
                columns,
                visibility,
                sort_key=spec.sort_key,
                sort_dir=spec.sort_dir,
                with_favorites=True,
                with_distance=spec.center is not None,
            )
            for line in render_table(headers, rows):
                print(line)
            print(f"{len(rows)} of {len(records)} attractions, ★ {store.count}")
    finally:
        store.close()
        if storage is not None:
            storage.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
