"""Output reporting helpers."""
from __future__ import annotations

import csv
import json
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple

from .projection import Cell, Row


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except Exception:
        return
    try:
        os.fsync(dir_fd)
    except Exception:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except Exception:
            pass
        raise


def atomic_write_text(path: str, text: str) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        f.write(text)


def row_columns(rows: Sequence[Row]) -> Tuple[List[str], List[str]]:
    """Computed column names and record column names, each in first-seen order.

    The two lists may share a name; callers lay values out by position.
    """
    computed: Dict[str, None] = {}
    names: Dict[str, None] = {}
    for row in rows:
        for name, _ in row.computed_cells():
            computed.setdefault(name, None)
        for name in row.cells:
            names.setdefault(name, None)
    return list(computed), list(names)


def row_texts(row: Row, computed: Sequence[str], names: Sequence[str]) -> List[str]:
    marks = dict(row.computed_cells())
    texts = [marks[name].plain() if name in marks else "" for name in computed]
    texts.extend(row.cells[name].plain() if name in row.cells else "" for name in names)
    return texts


def write_rows_csv(path: str, rows: Iterable[Row]) -> None:
    rows = list(rows)
    if not rows:
        with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
            f.write("")
        return

    computed, names = row_columns(rows)
    with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["id"] + computed + names)
        for row in rows:
            writer.writerow([row.record_id] + row_texts(row, computed, names))


def _cell_json(cell: Cell) -> Any:
    if cell.links:
        return [{"text": link.text, "href": link.href} for link in cell.links]
    return cell.text


def write_rows_json(path: str, rows: Iterable[Row]) -> None:
    payload = []
    for row in rows:
        item: Dict[str, Any] = {"id": row.record_id}
        for name, cell in row.computed_cells():
            item[name] = cell.text
        item["cells"] = {name: _cell_json(cell) for name, cell in row.cells.items()}
        payload.append(item)
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def write_json_object(path: str, payload: Dict[str, Any]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def _truncate(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: max(0, width - 1)] + "…"


def render_table(headers: Sequence[str], rows: Sequence[Row], max_width: int = 32) -> List[str]:
    """Plain-text table, one line per row, for terminal output."""
    computed, names = row_columns(rows)
    body = [[_truncate(text, max_width) for text in row_texts(row, computed, names)] for row in rows]
    labels = [_truncate(h, max_width) for h in headers]
    if not body:
        return [" | ".join(labels), "(no results)"]
    widths = [len(label) for label in labels]
    for cells in body:
        for i, text in enumerate(cells):
            if i < len(widths):
                widths[i] = max(widths[i], len(text))
    lines = [" | ".join(label.ljust(widths[i]) for i, label in enumerate(labels))]
    lines.append("-+-".join("-" * w for w in widths))
    for cells in body:
        lines.append(" | ".join(text.ljust(widths[i]) for i, text in enumerate(cells) if i < len(widths)))
    return lines
