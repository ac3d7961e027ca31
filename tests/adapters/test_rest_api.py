"""Tests for RestApiTaskStore.

Payload shapes are checked with httpx.MockTransport; the end-to-end tests
drive the real FastAPI app in-process through httpx.ASGITransport.
"""

from __future__ import annotations

import json

import httpx
import pytest

from tasknest.adapters.rest_api import RestApiTaskStore
from tasknest.exceptions import NotFoundError, TransportError, Unauthorized
from tasknest.models import Task, TaskCreate, TaskFilters
from tasknest.server.app import create_app
from tasknest.services.api.client import APIClient
from tasknest.services.optimistic import OptimisticTaskClient, find_inbox

TASK_JSON = {
    "id": "t1",
    "content": "Task",
    "projectId": "p1",
    "priority": 2,
    "tags": [],
    "isCompleted": False,
    "order": 0,
    "createdAt": "2024-05-15T10:00:00.000000Z",
    "updatedAt": "2024-05-15T10:00:00.000000Z",
}


def mock_store(handler) -> RestApiTaskStore:
    client = APIClient(
        "http://testserver/api", "tok", timeout=5, retry=0, transport=httpx.MockTransport(handler)
    )
    return RestApiTaskStore(client)


@pytest.mark.asyncio
async def test_update_sends_camel_case_diff_only():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=TASK_JSON)

    store = mock_store(handler)
    task = await store.update_task("t1", {"priority": 2, "due_date": None})
    await store.close()

    assert seen == {
        "method": "PUT",
        "path": "/api/tasks/t1",
        "body": {"priority": 2, "dueDate": None},
    }
    assert task.priority == 2


@pytest.mark.asyncio
async def test_list_sends_only_active_filters():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[TASK_JSON])

    store = mock_store(handler)
    tasks = await store.list_tasks("p1", TaskFilters(due_date="today"))
    await store.close()

    assert seen == {"path": "/api/tasks/project/p1", "params": {"dueDate": "today"}}
    assert [t.id for t in tasks] == ["t1"]


@pytest.mark.asyncio
async def test_create_sends_wire_payload():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=TASK_JSON)

    store = mock_store(handler)
    await store.create_task(TaskCreate(content="Task", project_id="p1", priority="medium"))
    await store.close()

    assert seen["body"] == {
        "content": "Task",
        "projectId": "p1",
        "priority": "medium",
        "tags": [],
        "order": 0,
    }


@pytest.mark.asyncio
async def test_non_json_success_body_is_a_transport_error():
    store = mock_store(lambda request: httpx.Response(200, text="<html>proxy</html>"))

    with pytest.raises(TransportError, match="not JSON"):
        await store.get_task("t1")
    await store.close()


@pytest.mark.asyncio
async def test_malformed_task_body_is_a_transport_error():
    store = mock_store(lambda request: httpx.Response(200, json={"id": "t1"}))

    with pytest.raises(TransportError, match="Malformed task"):
        await store.complete_task("t1")
    with pytest.raises(TransportError, match="expected a list"):
        await store.search_tasks("x")
    await store.close()


@pytest.mark.asyncio
async def test_html_response_rolls_back_optimistic_create():
    store = mock_store(lambda request: httpx.Response(200, text="<html>proxy</html>"))
    existing = Task.model_validate(TASK_JSON)
    errors = []
    client = OptimisticTaskClient(
        store, [existing], on_error=lambda message, error: errors.append(error)
    )

    result = await client.create(TaskCreate(content="B", project_id="p1"))
    await store.close()

    assert not result.ok
    assert isinstance(result.error, TransportError)
    assert client.tasks.ids == ["t1"]
    assert errors == [result.error]

# ---------------------------------------------------------------------------
# End to end against the FastAPI app
# ---------------------------------------------------------------------------


@pytest.fixture()
def app(connection, clock):
    return create_app(connection=connection, clock=clock)


def asgi_store(app, token: str | None) -> RestApiTaskStore:
    client = APIClient(
        "http://testserver/api",
        token,
        timeout=5,
        retry=0,
        transport=httpx.ASGITransport(app=app),
    )
    return RestApiTaskStore(client)


@pytest.mark.asyncio
async def test_optimistic_client_round_trip(app, owner):
    store = asgi_store(app, owner[1])
    inbox = find_inbox(await store.list_projects())
    client = OptimisticTaskClient(store)

    created = await client.create(TaskCreate(content="Pay rent", project_id=inbox.id, priority=3))
    assert created.ok
    assert client.tasks.ids == [created.task.id]

    toggled = await client.toggle_complete(created.task)
    assert toggled.ok and toggled.task.is_completed

    edited = await client.update(toggled.task.model_copy(update={"content": "Pay rent (May)"}))
    assert edited.ok and edited.task.content == "Pay rent (May)"

    await client.load(inbox.id)
    assert [t.content for t in client.tasks] == ["Pay rent (May)"]

    deleted = await client.delete(created.task.id)
    assert deleted.ok
    with pytest.raises(NotFoundError):
        await store.get_task(created.task.id)
    await store.close()


@pytest.mark.asyncio
async def test_subtasks_and_progress(app, owner):
    store = asgi_store(app, owner[1])
    inbox = find_inbox(await store.list_projects())
    parent = await store.create_task(TaskCreate(content="Move house", project_id=inbox.id))
    children = [
        await store.create_task(
            TaskCreate(content=name, project_id=inbox.id, parent_id=parent.id)
        )
        for name in ("Pack", "Rent van", "Clean")
    ]
    await store.complete_task(children[0].id)

    assert len(await store.get_subtasks(parent.id)) == 3
    assert await store.get_completion_percentage(parent.id) == 33
    top = await store.list_tasks(inbox.id, TaskFilters())
    assert [(t.id, t.subtask_count) for t in top] == [(parent.id, 3)]
    await store.close()


@pytest.mark.asyncio
async def test_bad_token_is_unauthorized(app, owner):
    store = asgi_store(app, "wrong")
    with pytest.raises(Unauthorized):
        await store.list_projects()
    await store.close()


@pytest.mark.asyncio
async def test_failed_delete_rolls_back_over_http(app, owner, other_owner):
    alice = asgi_store(app, owner[1])
    bob = asgi_store(app, other_owner[1])
    inbox = find_inbox(await alice.list_projects())
    task = await alice.create_task(TaskCreate(content="Mine", project_id=inbox.id))

    client = OptimisticTaskClient(bob, [task])
    result = await client.delete(task.id)

    assert not result.ok
    assert isinstance(result.error, NotFoundError)
    assert client.tasks.ids == [task.id]
    assert (await alice.get_task(task.id)).content == "Mine"
    await alice.close()
    await bob.close()
