"""TaskNest API router.

All routes below require a bearer token, except ``/health``. Static
``/tasks/...`` paths are registered before ``/tasks/{task_id}`` so they are
matched first.
"""

from fastapi import APIRouter, Depends, Query

from tasknest import __version__
from tasknest.models import ProjectCreate, TaskCreate, TaskFilters, TaskUpdate, User
from tasknest.repositories import ProjectRepository
from tasknest.server.dependencies import (
    get_activity_service,
    get_current_user,
    get_project_repository,
    get_task_service,
)
from tasknest.services.activity_service import ActivityService
from tasknest.services.task_service import TaskStoreService

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


# ============================================================================
# Task Endpoints
# ============================================================================


@router.post("/tasks", status_code=201)
async def create_task(
    payload: TaskCreate,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    task = await service.create_task(user.id, payload)
    return task.to_wire()


@router.get("/tasks/project/{project_id}")
async def list_tasks(
    project_id: str,
    parent_id: str | None = Query(None, alias="parentId"),
    due_date: str | None = Query(None, alias="dueDate"),
    priority: str | None = Query(None),
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    """List a project's tasks.

    ``parentId`` absent or ``null`` lists top-level tasks with their
    ``subtaskCount``; any other value lists that task's subtasks.
    """
    filters = TaskFilters(parent_id=parent_id, due_date=due_date, priority=priority)
    tasks = await service.list_tasks(user.id, project_id, filters)
    return [task.to_wire() for task in tasks]


@router.get("/tasks/search")
async def search_tasks(
    query: str | None = None,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    tasks = await service.search_tasks(user.id, query)
    return [task.to_wire() for task in tasks]


@router.get("/tasks/subtasks/{parent_id}")
async def get_subtasks(
    parent_id: str,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    tasks = await service.get_subtasks(user.id, parent_id)
    return [task.to_wire() for task in tasks]


@router.get("/tasks/completion/{parent_id}")
async def get_completion_percentage(
    parent_id: str,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    percentage = await service.get_completion_percentage(user.id, parent_id)
    return {"percentage": percentage}


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    task = await service.get_task(user.id, task_id)
    return task.to_wire()


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    task = await service.update_task(user.id, task_id, payload)
    return task.to_wire()


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    await service.delete_task(user.id, task_id)
    return {"message": "Task deleted"}


@router.patch("/tasks/{task_id}/complete")
async def complete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    task = await service.complete(user.id, task_id)
    return task.to_wire()


@router.patch("/tasks/{task_id}/uncomplete")
async def uncomplete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskStoreService = Depends(get_task_service),
):
    task = await service.uncomplete(user.id, task_id)
    return task.to_wire()


# ============================================================================
# Project & Activity Endpoints
# ============================================================================


@router.get("/projects")
async def list_projects(
    user: User = Depends(get_current_user),
    repo: ProjectRepository = Depends(get_project_repository),
):
    projects = await repo.list_all(user.id)
    return [p.model_dump(by_alias=True, mode="json") for p in projects]


@router.post("/projects", status_code=201)
async def create_project(
    payload: ProjectCreate,
    user: User = Depends(get_current_user),
    repo: ProjectRepository = Depends(get_project_repository),
):
    project = await repo.create(user.id, payload)
    return project.model_dump(by_alias=True, mode="json")


@router.get("/activity-logs")
async def list_activity(
    user: User = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    entries = await service.list_activity(user.id)
    return [e.model_dump(by_alias=True, mode="json") for e in entries]
