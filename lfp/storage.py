"""SQLite key-value storage for favorites and cached geocoding results."""
from __future__ import annotations

import hashlib
import json
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def make_geocode_cache_key(url: str, query: str) -> str:
    normalized = " ".join((query or "").split()).casefold()
    raw = f"{url}|{normalized}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


class KeyValueStore:
    """String key-value storage scoped to one local database file.

    Safe to share between the caller thread and the favorites writer thread.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._closed = False
        self._configure_conn()
        self._init_db()

    def _configure_conn(self) -> None:
        cur = self.conn.cursor()
        try:
            cur.execute("PRAGMA journal_mode=WAL")
            cur.fetchone()
        except sqlite3.DatabaseError:
            pass
        try:
            cur.execute("PRAGMA synchronous=NORMAL")
        except sqlite3.DatabaseError:
            pass

    def _init_db(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS geocode_cache (
                key TEXT PRIMARY KEY,
                query TEXT,
                response_json TEXT,
                created_at TEXT
            )
            """
        )
        self.conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self.conn.commit()
            self.conn.close()
            self._closed = True

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cur.fetchone()
        if not row:
            return None
        return row["value"]

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, value, utc_now_iso()),
            )
            self.conn.commit()

    def remove_item(self, key: str) -> None:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self.conn.commit()

    def get_geocode_cache(self, key: str) -> Optional[Any]:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT response_json FROM geocode_cache WHERE key = ?", (key,))
            row = cur.fetchone()
        if not row:
            return None
        return json.loads(row["response_json"])

    def set_geocode_cache(self, key: str, query: str, response: Any) -> None:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(
                """
                INSERT OR REPLACE INTO geocode_cache (key, query, response_json, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (key, query, json.dumps(response), utc_now_iso()),
            )
            self.conn.commit()

    def dump_items(self) -> Dict[str, str]:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT key, value FROM kv_store ORDER BY key")
            rows = cur.fetchall()
        return {row["key"]: row["value"] for row in rows}
