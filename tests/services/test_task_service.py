"""Tests for TaskStoreService against the real SQLite repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tasknest.adapters.sqlite import (
    SqliteActivityRepository,
    SqliteProjectRepository,
    SqliteTaskRepository,
)
from tasknest.exceptions import NotFoundError, ValidationError
from tasknest.models import ProjectCreate, TaskCreate, TaskFilters, TaskUpdate
from tasknest.services.activity_service import ActivityObserver, RepositoryActivityObserver
from tasknest.services.task_service import TaskStoreService, completion_percentage


@pytest.fixture()
def activity_repo(connection, clock):
    return SqliteActivityRepository(connection, clock)


@pytest.fixture()
def project_repo(connection, clock):
    return SqliteProjectRepository(connection, clock)


@pytest.fixture()
def task_repo(connection, clock):
    return SqliteTaskRepository(connection, clock)


@pytest.fixture()
def service(task_repo, project_repo, activity_repo, clock):
    return TaskStoreService(
        task_repo,
        project_repo,
        observers=[RepositoryActivityObserver(activity_repo)],
        clock=clock,
    )


@pytest.fixture()
def user_id(owner):
    return owner[0].id


async def _inbox(project_repo, user_id) -> str:
    return (await project_repo.get_inbox(user_id)).id


async def _actions(activity_repo, user_id) -> list[str]:
    return [e.action for e in reversed(await activity_repo.list_all(user_id))]


@pytest.mark.parametrize(
    "total, completed, expected",
    [(0, 0, 0), (3, 1, 33), (3, 2, 67), (8, 1, 13), (2, 1, 50), (4, 4, 100)],
)
def test_completion_percentage(total, completed, expected):
    assert completion_percentage(total, completed) == expected


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_normalizes_input(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)

        task = await service.create_task(
            user_id,
            TaskCreate(content="  Plan trip ", project_id=inbox, priority="High", tags=["travel"]),
        )

        assert task.content == "Plan trip"
        assert task.priority == 3
        assert task.tags == ["travel"]
        assert task.is_completed is False

    @pytest.mark.asyncio
    async def test_unknown_priority_becomes_none(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(
            user_id, TaskCreate(content="x", project_id=inbox, priority="whenever")
        )
        assert task.priority is None

    @pytest.mark.asyncio
    async def test_blank_content_is_rejected(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        with pytest.raises(ValidationError):
            await service.create_task(user_id, TaskCreate(content="   ", project_id=inbox))

    @pytest.mark.asyncio
    async def test_project_is_required(self, service, user_id):
        with pytest.raises(ValidationError):
            await service.create_task(user_id, TaskCreate(content="x"))

    @pytest.mark.asyncio
    async def test_foreign_project_is_not_found(self, service, project_repo, user_id, other_owner):
        foreign = await _inbox(project_repo, other_owner[0].id)
        with pytest.raises(NotFoundError):
            await service.create_task(user_id, TaskCreate(content="x", project_id=foreign))

    @pytest.mark.asyncio
    async def test_foreign_parent_is_not_found(self, service, project_repo, user_id, other_owner):
        bob = other_owner[0].id
        bob_task = await service.create_task(
            bob, TaskCreate(content="bob's", project_id=await _inbox(project_repo, bob))
        )
        inbox = await _inbox(project_repo, user_id)

        with pytest.raises(NotFoundError, match="Parent task not found"):
            await service.create_task(
                user_id, TaskCreate(content="x", project_id=inbox, parent_id=bob_task.id)
            )

    @pytest.mark.asyncio
    async def test_create_records_activity(self, service, project_repo, activity_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        await service.create_task(user_id, TaskCreate(content="Water plants", project_id=inbox))

        assert await _actions(activity_repo, user_id) == ["created: Water plants"]


class TestListing:
    @pytest.mark.asyncio
    async def test_top_level_and_subtasks_are_disjoint(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        parent = await service.create_task(user_id, TaskCreate(content="P", project_id=inbox))
        child = await service.create_task(
            user_id, TaskCreate(content="C", project_id=inbox, parent_id=parent.id)
        )

        top = await service.list_tasks(user_id, inbox, TaskFilters(parent_id="null"))
        subtasks = await service.get_subtasks(user_id, parent.id)

        assert [t.id for t in top] == [parent.id]
        assert top[0].subtask_count == 1
        assert [t.id for t in subtasks] == [child.id]

    @pytest.mark.asyncio
    async def test_unknown_filters_are_rejected(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        with pytest.raises(ValidationError):
            await service.list_tasks(user_id, inbox, TaskFilters(due_date="someday"))
        with pytest.raises(ValidationError):
            await service.list_tasks(user_id, inbox, TaskFilters(priority="critical"))

    @pytest.mark.asyncio
    async def test_due_today_uses_the_clock(self, service, project_repo, user_id, clock):
        inbox = await _inbox(project_repo, user_id)
        today = datetime(2024, 5, 15, 23, 0, tzinfo=UTC)
        due_today = await service.create_task(
            user_id, TaskCreate(content="today", project_id=inbox, due_date=today)
        )
        await service.create_task(
            user_id,
            TaskCreate(content="tomorrow", project_id=inbox, due_date=today + timedelta(hours=1)),
        )

        tasks = await service.list_tasks(user_id, inbox, TaskFilters(due_date="today"))

        assert [t.id for t in tasks] == [due_today.id]

    @pytest.mark.asyncio
    async def test_foreign_callers_see_nothing(self, service, project_repo, user_id, other_owner):
        inbox = await _inbox(project_repo, user_id)
        parent = await service.create_task(user_id, TaskCreate(content="P", project_id=inbox))
        await service.create_task(
            user_id, TaskCreate(content="C", project_id=inbox, parent_id=parent.id, tags=["x"])
        )
        bob = other_owner[0].id

        assert await service.list_tasks(bob, inbox) == []
        assert await service.get_subtasks(bob, parent.id) == []
        assert await service.get_completion_percentage(bob, parent.id) == 0
        assert await service.search_tasks(bob, "x") == []
        with pytest.raises(NotFoundError):
            await service.get_task(bob, parent.id)
        with pytest.raises(NotFoundError):
            await service.delete_task(bob, parent.id)

    @pytest.mark.asyncio
    async def test_completion_percentage(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        parent = await service.create_task(user_id, TaskCreate(content="P", project_id=inbox))
        children = [
            await service.create_task(
                user_id, TaskCreate(content=f"C{i}", project_id=inbox, parent_id=parent.id)
            )
            for i in range(3)
        ]
        assert await service.get_completion_percentage(user_id, parent.id) == 0

        await service.complete(user_id, children[0].id)

        assert await service.get_completion_percentage(user_id, parent.id) == 33

    @pytest.mark.asyncio
    async def test_search_ignores_accented_case(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(
            user_id, TaskCreate(content="Écrire le rapport", project_id=inbox)
        )

        results = await service.search_tasks(user_id, "écrire")

        assert [t.id for t in results] == [task.id]

    @pytest.mark.asyncio
    async def test_blank_search_returns_nothing(self, service, user_id):
        assert await service.search_tasks(user_id, "   ") == []
        assert await service.search_tasks(user_id, None) == []


class TestUpdate:
    @pytest.mark.asyncio
    async def test_only_sent_fields_change(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(
            user_id, TaskCreate(content="Task", project_id=inbox, description="keep", priority=1)
        )

        updated = await service.update_task(
            user_id, task.id, TaskUpdate.model_validate({"priority": "urgent"})
        )

        assert updated.priority == 4
        assert updated.description == "keep"
        assert updated.content == "Task"

    @pytest.mark.asyncio
    async def test_null_clears_a_field(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(
            user_id,
            TaskCreate(content="Task", project_id=inbox, due_date=datetime(2024, 6, 1, tzinfo=UTC)),
        )

        updated = await service.update_task(
            user_id, task.id, TaskUpdate.model_validate({"dueDate": None})
        )

        assert updated.due_date is None

    @pytest.mark.asyncio
    async def test_identity_fields_are_ignored(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        other = await project_repo.create(user_id, ProjectCreate(name="Other"))
        task = await service.create_task(user_id, TaskCreate(content="Task", project_id=inbox))

        updated = await service.update_task(
            user_id, task.id, TaskUpdate.model_validate({"projectId": other.id, "content": "New"})
        )

        assert updated.project_id == inbox
        assert updated.content == "New"

    @pytest.mark.asyncio
    async def test_blank_content_is_rejected(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(user_id, TaskCreate(content="Task", project_id=inbox))

        with pytest.raises(ValidationError):
            await service.update_task(user_id, task.id, TaskUpdate(content=" "))

    @pytest.mark.asyncio
    async def test_parent_must_exist(self, service, project_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(user_id, TaskCreate(content="Task", project_id=inbox))

        with pytest.raises(NotFoundError):
            await service.update_task(user_id, task.id, TaskUpdate(parent_id="missing"))
        with pytest.raises(ValidationError):
            await service.update_task(user_id, task.id, TaskUpdate(parent_id=task.id))

    @pytest.mark.asyncio
    async def test_foreign_task_is_not_found(self, service, project_repo, user_id, other_owner):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(user_id, TaskCreate(content="Task", project_id=inbox))

        with pytest.raises(NotFoundError):
            await service.update_task(other_owner[0].id, task.id, TaskUpdate(content="Mine"))


class TestCompletion:
    @pytest.mark.asyncio
    async def test_complete_twice_is_idempotent(self, service, project_repo, activity_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(user_id, TaskCreate(content="Task", project_id=inbox))

        first = await service.complete(user_id, task.id)
        second = await service.complete(user_id, task.id)

        assert first.is_completed and second.is_completed
        assert second.updated_at == first.updated_at
        actions = await _actions(activity_repo, user_id)
        assert actions.count("completed task") == 1

    @pytest.mark.asyncio
    async def test_uncomplete(self, service, project_repo, activity_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(user_id, TaskCreate(content="Task", project_id=inbox))

        await service.uncomplete(user_id, task.id)
        await service.complete(user_id, task.id)
        reopened = await service.uncomplete(user_id, task.id)

        assert reopened.is_completed is False
        assert await _actions(activity_repo, user_id) == [
            "created: Task",
            "completed task",
            "uncompleted task",
        ]


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_keeps_orphans(self, service, project_repo, activity_repo, user_id):
        inbox = await _inbox(project_repo, user_id)
        parent = await service.create_task(user_id, TaskCreate(content="P", project_id=inbox))
        child = await service.create_task(
            user_id, TaskCreate(content="C", project_id=inbox, parent_id=parent.id)
        )

        await service.delete_task(user_id, parent.id)

        assert (await service.get_task(user_id, child.id)).parent_id == parent.id
        assert (await _actions(activity_repo, user_id))[-1] == "deleted task"


class TestObservers:
    @pytest.mark.asyncio
    async def test_failing_observer_does_not_break_mutation(self, task_repo, project_repo, user_id):
        broken = MagicMock(spec=ActivityObserver)
        broken.record = AsyncMock(side_effect=RuntimeError("log store down"))
        healthy = MagicMock(spec=ActivityObserver)
        healthy.record = AsyncMock()
        service = TaskStoreService(task_repo, project_repo, observers=[broken, healthy])
        inbox = await _inbox(project_repo, user_id)

        with patch("tasknest.services.task_service.get_logger") as get_logger:
            task = await service.create_task(user_id, TaskCreate(content="x", project_id=inbox))

        assert task.content == "x"
        healthy.record.assert_awaited_once()
        event = healthy.record.await_args.args[0]
        assert (event.user_id, event.action, event.entity_id) == (user_id, "created: x", task.id)
        get_logger.return_value.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_noop_transition_emits_nothing(self, task_repo, project_repo, user_id):
        observer = MagicMock(spec=ActivityObserver)
        observer.record = AsyncMock()
        service = TaskStoreService(task_repo, project_repo, observers=[observer])
        inbox = await _inbox(project_repo, user_id)
        task = await service.create_task(user_id, TaskCreate(content="x", project_id=inbox))
        observer.record.reset_mock()

        await service.uncomplete(user_id, task.id)

        observer.record.assert_not_awaited()
