"""Project management commands."""

import typer

from tasknest.utils.typer_helpers import SuggestingGroup
from tasknest.utils.ui.formatters import format_output, format_success

from . import utils
from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Project management commands")


@app.command("list")
@command_wrapper
async def list_projects(
    output: str = typer.Option("pretty", "--output", "-o", help="Output format"),
) -> None:
    """List projects, inbox first."""
    store = utils.get_task_store()
    try:
        projects = await store.list_projects()
    finally:
        await store.close()

    format_output([p.model_dump(by_alias=True, mode="json") for p in projects], output)


@app.command("create")
@command_wrapper
async def create_project(
    name: str = typer.Argument(..., help="Project name"),
    color: str | None = typer.Option(None, "--color", help="Display color"),
    favorite: bool = typer.Option(False, "--favorite", help="Mark as favorite"),
) -> None:
    """Create a project."""
    store = utils.get_task_store()
    try:
        project = await store.projects_api.create_project(
            name, color=color, is_favorite=favorite
        )
    finally:
        await store.close()

    format_success(f"Created project {project['name']} ({project['id']})")


@app.command("activity")
@command_wrapper
async def list_activity(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show your activity log, newest first."""
    store = utils.get_task_store()
    try:
        entries = await store.projects_api.list_activity()
    finally:
        await store.close()

    format_output(entries, output)
