"""Task priority levels and their label/integer mappings."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class Priority(IntEnum):
    """Priority of a task.

    The stored integer scale is 1 (low) to 4 (urgent). ``NONE`` is stored
    as NULL and is what every unrecognized input normalizes to.
    """

    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4

    @property
    def label(self) -> str:
        """Human label, e.g. ``"high"``."""
        return self.name.lower()

    @property
    def stored(self) -> int | None:
        """Integer persisted in the store, None for no priority."""
        return None if self is Priority.NONE else int(self)

    @classmethod
    def parse(cls, value: Any) -> Priority:
        """Normalize a label, integer or numeric string into a Priority.

        Args:
            value: ``"low"``..``"urgent"`` (any case), 1-4, ``"1"``-``"4"``,
                a Priority, or None

        Returns:
            The matching Priority, or Priority.NONE when unrecognized
        """
        if isinstance(value, Priority):
            return value
        if isinstance(value, bool) or value is None:
            return cls.NONE
        if isinstance(value, int):
            return cls(value) if 1 <= value <= 4 else cls.NONE
        if isinstance(value, str):
            text = value.strip().lower()
            if text.isdigit():
                return cls.parse(int(text))
            return _LABELS.get(text, cls.NONE)
        return cls.NONE

    @classmethod
    def from_stored(cls, value: int | None) -> Priority:
        """Inverse of :attr:`stored`."""
        return cls.parse(value)


_LABELS = {p.label: p for p in Priority if p is not Priority.NONE}

# Filter values accepted by task listing, besides the labels themselves.
PRIORITY_FILTERS = ("all", "none", *(p.label for p in Priority if p is not Priority.NONE))
