"""Task management commands."""

import typer

from tasknest.exceptions import ValidationError
from tasknest.models import Priority, TaskCreate, TaskFilters
from tasknest.services.optimistic import SORT_ORDERS, OptimisticTaskClient
from tasknest.utils.typer_helpers import SuggestingGroup
from tasknest.utils.ui.formatters import (
    format_info,
    format_output,
    format_progress,
    format_success,
)

from . import utils
from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")

OUTPUT_HELP = "Output format: pretty, table, json, yaml"


def _quiet_errors(message: str, error: Exception) -> None:
    """Errors are reported by command_wrapper."""


def _notify(message: str) -> None:
    format_success(message)


@app.command("list")
@command_wrapper
async def list_tasks(
    project: str | None = typer.Option(None, "--project", "-p", help="Project ID or name (default: Inbox)"),
    parent: str | None = typer.Option(None, "--parent", help="List subtasks of this task"),
    due: str = typer.Option("all", "--due", help="all, today, tomorrow, this_week, overdue"),
    priority: str = typer.Option("all", "--priority", help="all, none, low, medium, high, urgent"),
    sort: str = typer.Option("default", "--sort", help=f"Sort order: {', '.join(SORT_ORDERS)}"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """List a project's tasks."""
    store = utils.get_task_store()
    try:
        target = await utils.resolve_project(store, project)
        client = OptimisticTaskClient(store)
        await client.load(
            target.id, TaskFilters(parent_id=parent, due_date=due, priority=priority)
        )
        tasks = client.sorted_tasks(sort)
    finally:
        await store.close()

    format_output([task.to_wire() for task in tasks], output)


@app.command("get")
@command_wrapper
async def get_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Show one task."""
    store = utils.get_task_store()
    try:
        task = await store.get_task(task_id)
    finally:
        await store.close()

    format_output(task.to_wire(), output)


@app.command("create")
@command_wrapper
async def create_task(
    content: str = typer.Argument(..., help="Task content"),
    project: str | None = typer.Option(None, "--project", "-p", help="Project ID or name (default: Inbox)"),
    description: str | None = typer.Option(None, "--description", "-d", help="Description"),
    priority: str | None = typer.Option(None, "--priority", help="low, medium, high, urgent or 1-4"),
    due: str | None = typer.Option(None, "--due", help="Due date (YYYY-MM-DD)"),
    tags: list[str] = typer.Option([], "--tag", "-t", help="Tag (repeatable)"),
    parent: str | None = typer.Option(None, "--parent", help="Parent task ID"),
    order: int = typer.Option(0, "--order", help="Manual sort key"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Create a task."""
    store = utils.get_task_store()
    try:
        target = await utils.resolve_project(store, project)
        draft = TaskCreate(
            content=content,
            project_id=target.id,
            description=description,
            priority=priority,
            due_date=utils.parse_due(due),
            tags=list(tags),
            parent_id=parent,
            order=order,
        )
        client = OptimisticTaskClient(store, on_error=_quiet_errors, on_success=_notify)
        result = await client.create(draft)
    finally:
        await store.close()

    if not result.ok:
        raise result.error
    format_output(result.task.to_wire(), output)


@app.command("update")
@command_wrapper
async def update_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    content: str | None = typer.Option(None, "--content", help="New content"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    priority: str | None = typer.Option(None, "--priority", help="none, low, medium, high, urgent or 1-4"),
    due: str | None = typer.Option(None, "--due", help="New due date (YYYY-MM-DD)"),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
    tags: list[str] | None = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)"),
    parent: str | None = typer.Option(None, "--parent", help="New parent task ID"),
    order: int | None = typer.Option(None, "--order", help="Manual sort key"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Update a task. Only fields that actually change are sent."""
    if due is not None and clear_due:
        raise ValidationError("--due and --clear-due are mutually exclusive")

    store = utils.get_task_store()
    try:
        current = await store.get_task(task_id)
        draft = current.model_copy(deep=True)
        if content is not None:
            draft.content = content
        if description is not None:
            draft.description = description
        if priority is not None:
            draft.priority = Priority.parse(priority).stored
        if due is not None:
            draft.due_date = utils.parse_due(due)
        if clear_due:
            draft.due_date = None
        if tags:
            draft.tags = list(tags)
        if parent is not None:
            draft.parent_id = parent
        if order is not None:
            draft.order = order

        client = OptimisticTaskClient(store, [current], on_error=_quiet_errors, on_success=_notify)
        result = await client.update(draft)
    finally:
        await store.close()

    if not result.ok:
        raise result.error
    if result.task is current:
        format_info("Nothing to update")
        return
    format_output(result.task.to_wire(), output)


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task. Its subtasks are kept."""
    if not yes and not typer.confirm(f"Delete task {task_id}?"):
        format_info("Cancelled")
        return

    store = utils.get_task_store()
    try:
        client = OptimisticTaskClient(store, on_error=_quiet_errors, on_success=_notify)
        result = await client.delete(task_id)
    finally:
        await store.close()

    if not result.ok:
        raise result.error


@app.command("complete")
@command_wrapper
async def complete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Mark a task completed."""
    store = utils.get_task_store()
    try:
        task = await store.complete_task(task_id)
    finally:
        await store.close()

    format_success(f"Completed: {task.content}")


@app.command("uncomplete")
@command_wrapper
async def uncomplete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Mark a task not completed."""
    store = utils.get_task_store()
    try:
        task = await store.uncomplete_task(task_id)
    finally:
        await store.close()

    format_success(f"Reopened: {task.content}")


@app.command("toggle")
@command_wrapper
async def toggle_task(
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Flip a task between completed and not completed."""
    store = utils.get_task_store()
    try:
        current = await store.get_task(task_id)
        client = OptimisticTaskClient(store, [current], on_error=_quiet_errors, on_success=_notify)
        result = await client.toggle_complete(current)
    finally:
        await store.close()

    if not result.ok:
        raise result.error


@app.command("subtasks")
@command_wrapper
async def list_subtasks(
    parent_id: str = typer.Argument(..., help="Parent task ID"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """List a task's direct subtasks."""
    store = utils.get_task_store()
    try:
        tasks = await store.get_subtasks(parent_id)
    finally:
        await store.close()

    format_output([task.to_wire() for task in tasks], output)


@app.command("progress")
@command_wrapper
async def show_progress(
    parent_id: str = typer.Argument(..., help="Parent task ID"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Show the completion percentage of a task's subtasks."""
    store = utils.get_task_store()
    try:
        percentage = await store.get_completion_percentage(parent_id)
    finally:
        await store.close()

    if output == "pretty":
        format_info(format_progress(percentage))
    else:
        format_output({"percentage": percentage}, output)


@app.command("search")
@command_wrapper
async def search_tasks(
    query: str = typer.Argument(..., help="Text to find in content or tags"),
    sort: str = typer.Option("default", "--sort", help=f"Sort order: {', '.join(SORT_ORDERS)}"),
    output: str = typer.Option("pretty", "--output", "-o", help=OUTPUT_HELP),
) -> None:
    """Search tasks across all projects."""
    store = utils.get_task_store()
    try:
        client = OptimisticTaskClient(store)
        await client.search(query)
        tasks = client.sorted_tasks(sort)
    finally:
        await store.close()

    format_output([task.to_wire() for task in tasks], output)
