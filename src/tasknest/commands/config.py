"""Configuration management commands."""

import typer

from tasknest.services.config_service import get_config_service
from tasknest.utils.logger import log_file_path
from tasknest.utils.typer_helpers import SuggestingGroup
from tasknest.utils.ui.formatters import console, format_info, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")

@app.command("show")
@command_wrapper(auth_required=False)
def show_config(
    output: str = typer.Option("yaml", "--output", "-o", help="Output format"),
) -> None:
    """Show the current configuration."""
    config_service = get_config_service()
    format_output(config_service.config.model_dump(), output)
    format_info(f"Config file: {config_service.config_path}")
    format_info(f"Log file: {log_file_path()}")


@app.command("get")
@command_wrapper(auth_required=False)
def get_value(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
) -> None:
    """Print a configuration value."""
    console.print(get_config_service().get_value(key))


@app.command("set")
@command_wrapper(auth_required=False)
def set_value(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    config_service = get_config_service()
    config_service.set_value(key, value)
    format_success(f"Configuration '{key}' set to '{config_service.get_value(key)}'")


@app.command("reset")
@command_wrapper(auth_required=False)
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("Reset all configuration to defaults?"):
        format_info("Cancelled")
        return
    get_config_service().reset_config()
    format_success("Configuration reset to defaults")
