"""Unit tests for SqliteProjectRepository."""

from __future__ import annotations

import pytest

from tasknest.adapters.sqlite.project_repository import SqliteProjectRepository
from tasknest.exceptions import NotFoundError, ValidationError
from tasknest.models import ProjectCreate


@pytest.fixture()
def repo(connection, clock):
    return SqliteProjectRepository(connection, clock)


@pytest.mark.asyncio
async def test_new_user_has_exactly_one_inbox(repo, owner):
    projects = await repo.list_all(owner[0].id)

    assert [p.name for p in projects] == ["Inbox"]
    assert projects[0].is_inbox


@pytest.mark.asyncio
async def test_list_puts_inbox_first(repo, owner):
    user_id = owner[0].id
    await repo.create(user_id, ProjectCreate(name="Alpha"))
    await repo.create(user_id, ProjectCreate(name="Zeta", is_favorite=True))

    names = [p.name for p in await repo.list_all(user_id)]

    assert names == ["Inbox", "Zeta", "Alpha"]


@pytest.mark.asyncio
async def test_get_inbox_is_stable(repo, owner):
    first = await repo.get_inbox(owner[0].id)
    second = await repo.get_inbox(owner[0].id)
    assert first.id == second.id


@pytest.mark.asyncio
async def test_projects_are_scoped(repo, owner, other_owner):
    project = await repo.create(owner[0].id, ProjectCreate(name="Secret"))

    with pytest.raises(NotFoundError):
        await repo.get(other_owner[0].id, project.id)
    assert "Secret" not in [p.name for p in await repo.list_all(other_owner[0].id)]


@pytest.mark.asyncio
async def test_blank_name_is_rejected(repo, owner):
    with pytest.raises(ValidationError):
        await repo.create(owner[0].id, ProjectCreate(name="   "))
