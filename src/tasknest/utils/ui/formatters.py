"""Output formatters for different formats.

Data arrives as wire dicts (camelCase keys, as returned by the API).
"""

import json
from datetime import datetime
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from tasknest.utils.dates import ensure_utc, start_of_day, utc_now

console = Console()

OUTPUT_FORMATS = ("pretty", "table", "json", "yaml")


def format_output(data: Any, output_format: str = "pretty") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False))
    elif output_format == "table":
        format_table(data)
    else:
        format_pretty(data)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_table(data: Any) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No items found[/yellow]")
        return

    if isinstance(data, list):
        if isinstance(data[0], dict):
            format_dict_table(data)
        else:
            for item in data:
                console.print(item)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    columns: list[str] = []
    for item in items:
        columns.extend(key for key in item if key not in columns)

    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col)

    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(key, _cell(value))

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Pretty Format Implementation
# ============================================================================

PRIORITY_ICONS = {
    4: "🔴",  # URGENT
    3: "🟠",  # HIGH
    2: "🟡",  # MEDIUM
    1: "🟢",  # LOW
}

PRIORITY_COLORS = {
    4: "bold red",
    3: "bold orange3",
    2: "bold yellow",
    1: "green",
}

STATUS_ICONS = {
    "open": "⬜",
    "completed": "☑️",
}


def format_pretty(data: Any) -> None:
    """Format data in pretty format with colors and icons."""
    if not data:
        console.print("[yellow]No items found[/yellow]")
        return

    if isinstance(data, list):
        first_item = data[0]
        if isinstance(first_item, dict) and "content" in first_item:
            format_tasks_pretty(data)
        elif isinstance(first_item, dict) and "name" in first_item:
            format_projects_pretty(data)
        else:
            format_table(data)
    elif isinstance(data, dict) and "content" in data:
        format_task_item(data, detailed=True)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def is_overdue(due_date: Any) -> bool:
    """Whether a due date falls before today (UTC)."""
    due = ensure_utc(due_date)
    return isinstance(due, datetime) and due < start_of_day(utc_now())


def format_due_date(due_date: Any) -> str:
    """Short human form of a due date."""
    due = ensure_utc(due_date)
    if not isinstance(due, datetime):
        return str(due_date)
    days = (start_of_day(due) - start_of_day(utc_now())).days
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    if days == -1:
        return "yesterday"
    return due.strftime("%b %d, %Y")


def format_tasks_pretty(tasks: list[dict]) -> None:
    """Format tasks in pretty format."""
    active = [t for t in tasks if not t.get("isCompleted")]

    header = Text()
    header.append("📋 Tasks ", style="bold cyan")
    header.append(f"({len(active)} active, {len(tasks) - len(active)} done)", style="dim")
    console.print(header)
    console.print()

    for task in tasks:
        format_task_item(task, indent="  ")


def format_task_item(task: dict, indent: str = "", detailed: bool = False) -> None:
    """Format a single task item."""
    is_completed = task.get("isCompleted", False)
    status_icon = STATUS_ICONS["completed" if is_completed else "open"]
    priority = task.get("priority")

    line = Text(f"{indent}{status_icon} ")
    if priority in PRIORITY_ICONS:
        line.append(f"{PRIORITY_ICONS[priority]} ")
    line.append(task.get("content", "Untitled"), style="dim" if is_completed else "")

    if task.get("dueDate"):
        style = "bold red" if is_overdue(task["dueDate"]) and not is_completed else "cyan"
        line.append(f" • {format_due_date(task['dueDate'])}", style=style)

    for tag in task.get("tags", []):
        line.append(f" #{tag}", style="blue")

    if task.get("subtaskCount"):
        line.append(f" [{task['subtaskCount']} subtasks]", style="dim")

    line.append(f"  {task.get('id', '')}", style="dim")
    console.print(line)

    if detailed:
        if task.get("description"):
            console.print(f"{indent}   {task['description']}")
        if task.get("parentId"):
            console.print(f"{indent}   [dim]parent: {task['parentId']}[/dim]")
        console.print(f"{indent}   [dim]project: {task.get('projectId')}[/dim]")


def format_projects_pretty(projects: list[dict]) -> None:
    """Format projects in pretty format."""
    console.print(Text("📁 Projects", style="bold cyan"))
    console.print()
    for project in projects:
        icon = "📥" if project.get("isInbox") else ("⭐" if project.get("isFavorite") else "📁")
        line = Text(f"  {icon} ")
        line.append(project.get("name", ""), style="bold" if project.get("isInbox") else "")
        line.append(f"  {project.get('id', '')}", style="dim")
        console.print(line)


def format_progress(percentage: int, width: int = 20) -> str:
    """Render a percentage as a text progress bar."""
    filled = round(width * percentage / 100)
    return f"[{'█' * filled}{'░' * (width - filled)}] {percentage}%"
