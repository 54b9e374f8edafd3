"""Favorite marks keyed by record id, persisted through a key-value store.

The in-memory set is replaced on every toggle and written in the background.
Reads and writes never raise: unreadable storage means "no favorites" and a
failed write only logs a warning.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Protocol

from . import config
from .outcome import DegradeReason, Outcome

logger = logging.getLogger(__name__)

FavoriteSet = Dict[str, bool]


class StringStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


def toggle(favorites: Mapping[str, bool], record_id: str) -> FavoriteSet:
    updated = dict(favorites)
    if updated.get(record_id):
        del updated[record_id]
    else:
        updated[record_id] = True
    return updated


def parse_favorites(raw: Optional[str]) -> Outcome[FavoriteSet]:
    if not raw:
        return Outcome.success({})
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        return Outcome.fallback({}, DegradeReason.PERSISTENCE_UNAVAILABLE, f"corrupt payload: {exc}")
    if not isinstance(payload, dict):
        return Outcome.fallback(
            {}, DegradeReason.PERSISTENCE_UNAVAILABLE, f"unexpected payload type {type(payload).__name__}"
        )
    return Outcome.success({str(k): True for k, v in payload.items() if v is True})


def serialize_favorites(favorites: Mapping[str, bool]) -> str:
    return json.dumps({k: True for k, v in favorites.items() if v}, ensure_ascii=False, sort_keys=True)


class FavoriteStore:
    def __init__(self, storage: Optional[StringStorage], key: Optional[str] = None) -> None:
        self.storage = storage
        self.key = key or config.FAVORITES_KEY
        self.favorites: FavoriteSet = {}
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []

    def load_outcome(self) -> Outcome[FavoriteSet]:
        if self.storage is None:
            return Outcome.fallback({}, DegradeReason.PERSISTENCE_UNAVAILABLE, "storage disabled")
        try:
            raw = self.storage.get_item(self.key)
        except Exception as exc:
            return Outcome.fallback({}, DegradeReason.PERSISTENCE_UNAVAILABLE, str(exc))
        return parse_favorites(raw)

    def load(self) -> FavoriteSet:
        outcome = self.load_outcome()
        if outcome.degraded:
            logger.warning("Favorites unavailable (%s): %s", outcome.reason.value, outcome.detail)
        self.favorites = dict(outcome.value)
        return dict(self.favorites)

    def save_outcome(self, favorites: Mapping[str, bool]) -> Outcome[None]:
        if self.storage is None:
            return Outcome.fallback(None, DegradeReason.PERSISTENCE_UNAVAILABLE, "storage disabled")
        try:
            self.storage.set_item(self.key, serialize_favorites(favorites))
        except Exception as exc:
            return Outcome.fallback(None, DegradeReason.PERSISTENCE_UNAVAILABLE, str(exc))
        return Outcome.success(None)

    def save(self, favorites: Mapping[str, bool]) -> None:
        outcome = self.save_outcome(favorites)
        if outcome.degraded:
            logger.warning("Favorites not saved (%s): %s", outcome.reason.value, outcome.detail)

    def is_favorite(self, record_id: str) -> bool:
        return bool(self.favorites.get(record_id))

    @property
    def count(self) -> int:
        return len(self.favorites)

    def toggle(self, record_id: str) -> FavoriteSet:
        self.favorites = toggle(self.favorites, record_id)
        self._submit_save(dict(self.favorites))
        return dict(self.favorites)

    def _submit_save(self, snapshot: FavoriteSet) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="favorites-save")
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(self.save, snapshot))

    def flush(self) -> None:
        pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def close(self) -> None:
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
