"""Main entry point for the TaskNest CLI."""

import typer

from tasknest import __version__
from tasknest.commands import auth, config, projects, serve, tasks, users
from tasknest.utils.typer_helpers import SuggestingGroup
from tasknest.utils.ui.formatters import console

app = typer.Typer(
    name="tasknest",
    cls=SuggestingGroup,
    help="Tasks with subtasks: an HTTP store and an optimistic client",
    no_args_is_help=True,
)

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(projects.app, name="projects", help="Project management commands")
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(users.app, name="users", help="User administration (server side)")

app.command("login")(auth.login)
app.command("logout")(auth.logout)
app.command("serve")(serve.serve)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]TaskNest[/bold] version [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
