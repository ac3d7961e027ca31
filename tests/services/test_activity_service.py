"""Tests for the activity observer and log."""

from __future__ import annotations

import pytest

from tasknest.adapters.sqlite import SqliteActivityRepository
from tasknest.services.activity_service import (
    ActivityEvent,
    ActivityService,
    RepositoryActivityObserver,
)


@pytest.mark.asyncio
async def test_observer_persists_events_newest_first(connection, clock, owner):
    repo = SqliteActivityRepository(connection, clock)
    observer = RepositoryActivityObserver(repo)
    user_id = owner[0].id

    await observer.record(ActivityEvent(user_id=user_id, action="created: a", entity_id="t1"))
    await observer.record(ActivityEvent(user_id=user_id, action="deleted task", entity_id="t1"))

    entries = await ActivityService(repo).list_activity(user_id)

    assert [e.action for e in entries] == ["deleted task", "created: a"]
    assert entries[0].entity_type == "task"
    assert entries[0].entity_id == "t1"


@pytest.mark.asyncio
async def test_activity_is_per_user(connection, clock, owner, other_owner):
    repo = SqliteActivityRepository(connection, clock)
    await repo.add(owner[0].id, "updated task", "task", "t1")

    assert await repo.list_all(other_owner[0].id) == []
