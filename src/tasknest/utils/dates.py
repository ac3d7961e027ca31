"""UTC date helpers: normalization, storage format and due-date windows."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import Any, NamedTuple

# Fixed-width so that stored values compare correctly as strings.
STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

DUE_FILTERS = ("all", "today", "tomorrow", "this_week", "overdue")

_ONE_DAY = timedelta(days=1)
_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: Any) -> datetime | None:
    """Coerce strings, dates and datetimes into aware UTC datetimes.

    Naive values are taken to be UTC already. Plain dates become midnight UTC.
    Anything else is returned unchanged so model validation can reject it.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    return value


def to_storage(value: datetime | date | str | None) -> str | None:
    """Format a datetime for the database."""
    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.strftime(STORAGE_FORMAT)


def from_storage(value: str | None) -> datetime | None:
    """Parse a value written by :func:`to_storage`."""
    if value is None:
        return None
    return ensure_utc(value)


def start_of_day(moment: datetime) -> datetime:
    """00:00:00 UTC of the day containing ``moment``."""
    moment = ensure_utc(moment)
    return datetime.combine(moment.date(), time.min, tzinfo=UTC)


class DueWindow(NamedTuple):
    """Bounds of a due-date filter.

    ``start`` is inclusive. ``end`` is inclusive when ``end_inclusive`` is set,
    exclusive otherwise. A None bound is open.
    """

    start: datetime | None
    end: datetime | None
    end_inclusive: bool = False
    incomplete_only: bool = False

    def contains(self, due: datetime | None, is_completed: bool = False) -> bool:
        """Whether a task with this due date and state falls in the window."""
        if due is None:
            return False
        if self.incomplete_only and is_completed:
            return False
        due = ensure_utc(due)
        if self.start is not None and due < self.start:
            return False
        if self.end is not None:
            if self.end_inclusive and due > self.end:
                return False
            if not self.end_inclusive and due >= self.end:
                return False
        return True


def due_window(due_filter: str, now: datetime) -> DueWindow | None:
    """Translate a due-date filter name into a window anchored at ``now``.

    Args:
        due_filter: One of DUE_FILTERS
        now: Reference moment (UTC)

    Returns:
        The window, or None for ``"all"``

    Raises:
        ValueError: If the filter name is unknown
    """
    today = start_of_day(now)

    if due_filter == "all":
        return None
    if due_filter == "today":
        return DueWindow(today, today + _ONE_DAY)
    if due_filter == "tomorrow":
        tomorrow = today + _ONE_DAY
        return DueWindow(tomorrow, tomorrow + _ONE_DAY - _ONE_MS, end_inclusive=True)
    if due_filter == "this_week":
        # Weeks run Sunday..Saturday; date.weekday() has Monday = 0.
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        return DueWindow(sunday, sunday + 7 * _ONE_DAY - _ONE_MS, end_inclusive=True)
    if due_filter == "overdue":
        return DueWindow(None, today, incomplete_only=True)
    raise ValueError(f"Unknown due date filter: {due_filter}")
