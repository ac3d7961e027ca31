"""Login and logout commands."""

import typer

from tasknest.services.config_service import get_config_service
from tasknest.utils.ui.formatters import format_info, format_success

from .decorators import command_wrapper


@command_wrapper(auth_required=False)
def login(
    token: str = typer.Argument(..., help="API token from 'tasknest users add'"),
    endpoint: str | None = typer.Option(None, "--endpoint", help="API endpoint URL"),
) -> None:
    """Save an API token for subsequent commands."""
    config_service = get_config_service()
    if endpoint:
        config_service.set_value("api.endpoint", endpoint)
    config_service.save_credentials(token.strip())
    format_success(f"Logged in to {config_service.config.api.endpoint}")


@command_wrapper(auth_required=False)
def logout() -> None:
    """Forget the saved API token."""
    config_service = get_config_service()
    if config_service.load_credentials() is None:
        format_info("Not logged in")
        return
    config_service.clear_credentials()
    format_success("Logged out")
