import csv
import json

from lfp.projection import header_labels, project_rows
from lfp.query import Center
from lfp.reporting import atomic_write_text, render_table, write_json_object, write_rows_csv, write_rows_json
from lfp.schema import ColumnVisibility, discover_columns


def _rows():
    records = [
        {"Einrichtung": "Zoo", "PLZ": "70000", "Homepage": "zoo.example.org, b.example.org"},
        {"Einrichtung": "Museum Ä", "PLZ": "70001"},
    ]
    columns = discover_columns(records)
    visibility = ColumnVisibility()
    visibility.seed(columns)
    return project_rows(records, columns, visibility, favorites={"70000::Zoo": True})


def test_atomic_write_text(tmp_path):
    path = tmp_path / "atomic.txt"

    atomic_write_text(str(path), "first")
    assert path.read_text(encoding="utf-8") == "first"

    atomic_write_text(str(path), "second")
    assert path.read_text(encoding="utf-8") == "second"

    leftovers = [p for p in tmp_path.iterdir() if p.name != "atomic.txt"]
    assert not leftovers


def test_write_rows_csv(tmp_path):
    path = tmp_path / "results.csv"
    write_rows_csv(str(path), _rows())

    with path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["id"] for r in rows] == ["70000::Zoo", "70001::Museum Ä"]
    assert rows[0]["favorite"] == "★"
    assert rows[0]["Homepage"] == "http://zoo.example.org\nhttp://b.example.org"
    assert rows[1]["Homepage"] == ""


def test_write_rows_csv_empty(tmp_path):
    path = tmp_path / "results.csv"
    write_rows_csv(str(path), [])
    assert path.read_text(encoding="utf-8") == ""


def test_write_rows_json_keeps_links(tmp_path):
    path = tmp_path / "results.json"
    write_rows_json(str(path), _rows())

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data[0]["id"] == "70000::Zoo"
    assert data[0]["favorite"] == "★"
    assert "favorite" not in data[0]["cells"]
    assert data[0]["cells"]["Homepage"] == [
        {"text": "zoo.example.org", "href": "http://zoo.example.org"},
        {"text": "b.example.org", "href": "http://b.example.org"},
    ]
    assert "Ä" in path.read_text(encoding="utf-8")


def test_write_json_object_nested_atomic(tmp_path):
    path = tmp_path / "markers.geojson"
    payload = {"type": "FeatureCollection", "features": [{"properties": {"title": "Zoo Süd"}}]}

    write_json_object(str(path), payload)

    assert json.loads(path.read_text(encoding="utf-8")) == payload
    leftovers = [p for p in tmp_path.iterdir() if p.name != "markers.geojson"]
    assert not leftovers


def test_render_table_aligns_columns():
    lines = render_table(["favorite", "Einrichtung", "PLZ", "Homepage"], _rows())
    assert lines[0].split(" | ")[1].strip() == "Einrichtung"
    assert len(lines) == 4
    assert "Museum Ä" in lines[3]


def test_render_table_no_results():
    assert render_table(["Einrichtung"], []) == ["Einrichtung", "(no results)"]


def _colliding_rows():
    records = [
        {"Einrichtung": "Zoo", "PLZ": "70000", "Latitude": 48.7, "Longitude": 9.0, "distance": "5 km walk"},
    ]
    columns = discover_columns(records)
    visibility = ColumnVisibility()
    visibility.seed(columns)
    rows = project_rows(records, columns, visibility, favorites={}, center=Center(lat=48.7, lon=9.0))
    return columns, visibility, rows


def test_write_rows_csv_keeps_computed_distance_next_to_record_column(tmp_path):
    _, _, rows = _colliding_rows()
    path = tmp_path / "results.csv"
    write_rows_csv(str(path), rows)

    with path.open(encoding="utf-8", newline="") as f:
        header, values = list(csv.reader(f))
    assert header == ["id", "favorite", "distance", "Einrichtung", "PLZ", "distance"]
    assert values == ["70000::Zoo", "☆", "0.0", "Zoo", "70000", "5 km walk"]


def test_render_table_headers_match_body_with_colliding_column():
    columns, visibility, rows = _colliding_rows()
    headers = header_labels(columns, visibility, with_distance=True)

    lines = render_table(headers, rows)

    assert len(lines[0].split(" | ")) == len(lines[2].split(" | ")) == 5
    assert [c.strip() for c in lines[2].split(" | ")] == ["☆", "0.0", "Zoo", "70000", "5 km walk"]
