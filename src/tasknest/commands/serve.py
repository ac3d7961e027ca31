"""Run the TaskNest API server."""

import typer

from tasknest.server.app import run_server
from tasknest.services.config_service import get_config_service
from tasknest.utils.ui.formatters import format_info

from .decorators import command_wrapper


@command_wrapper(auth_required=False)
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Port"),
    db: str | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Serve the task store over HTTP."""
    config_service = get_config_service()
    server = config_service.config.server
    host = host or server.host
    port = port or server.port
    db_path = str(db or config_service.default_db_path())

    format_info(f"Serving on http://{host}:{port}/api (database: {db_path})")
    run_server(host, port, db_path)
