"""User administration against the local store database."""

import typer

from tasknest.adapters.sqlite.connection import create_connection
from tasknest.adapters.sqlite.user_manager import create_user, rotate_token
from tasknest.exceptions import NotFoundError
from tasknest.services.config_service import get_config_service
from tasknest.utils.typer_helpers import SuggestingGroup
from tasknest.utils.ui.formatters import console, format_success, format_warning

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="User administration (server side)")

def _open_db(db: str | None):
    return create_connection(db or get_config_service().default_db_path())


@app.command("add")
@command_wrapper(auth_required=False)
def add_user(
    email: str = typer.Argument(..., help="Email address"),
    name: str | None = typer.Option(None, "--name", help="Display name"),
    db: str | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Create a user with an Inbox project and print its API token."""
    connection = _open_db(db)
    try:
        user, token = create_user(connection, email, name)
    finally:
        connection.close()

    format_success(f"Created user {user.email} ({user.id})")
    format_warning("The token is shown only once:")
    console.print(token, highlight=False)


@app.command("rotate-token")
@command_wrapper(auth_required=False)
def rotate_user_token(
    email: str = typer.Argument(..., help="Email address"),
    db: str | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Issue a new API token, invalidating the old one."""
    connection = _open_db(db)
    try:
        token = rotate_token(connection, email)
    finally:
        connection.close()

    if token is None:
        raise NotFoundError(f"No user with email {email}")
    format_success(f"New token for {email}:")
    console.print(token, highlight=False)
