"""Named degradation results for collaborators that never raise to callers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class DegradeReason(str, Enum):
    MALFORMED_RECORD = "malformed_record"
    PERSISTENCE_UNAVAILABLE = "persistence_unavailable"
    NO_GEOCODE_MATCH = "no_geocode_match"
    NETWORK_FAILURE = "network_failure"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """A usable value plus the reason it is a fallback, if it is one."""

    value: T
    reason: Optional[DegradeReason] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None

    @property
    def degraded(self) -> bool:
        return self.reason is not None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, reason: DegradeReason, detail: str = "") -> "Outcome[T]":
        return cls(value=value, reason=reason, detail=detail)
