"""Utility functions for the SQLite adapter."""

from __future__ import annotations

import hashlib
import json
import unicodedata
import uuid
from typing import Any


def generate_uuid() -> str:
    """Generate a new UUID as string."""
    return str(uuid.uuid4())


def hash_token(token: str) -> str:
    """SHA-256 hex digest of an API token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary."""
    if row is None:
        return {}
    return dict(row)


def dump_tags(tags: list[str] | None) -> str:
    """Serialize tags for the ``tags`` column."""
    return json.dumps(list(tags or []))


def load_tags(value: str | None) -> list[str]:
    """Parse the ``tags`` column."""
    if not value:
        return []
    return list(json.loads(value))


def fold_case(value: Any) -> Any:
    """Unicode case folding for search; registered as SQL ``casefold()``."""
    if not isinstance(value, str):
        return value
    return unicodedata.normalize("NFC", value).casefold()
