"""Static display labels."""
from __future__ import annotations

from typing import Any

from . import config
from .schema import display_text


def explain_entry_fee(code: Any) -> str:
    text = display_text(code)
    return config.ENTRY_FEE_LABELS.get(text, text)
