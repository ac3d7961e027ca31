"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer

from tasknest.exceptions import TaskNestError
from tasknest.services.auth_service import AuthService
from tasknest.utils import exit_codes
from tasknest.utils.logger import get_logger
from tasknest.utils.ui.formatters import format_error, format_info

# Failures where the exit code description tells the user what to do next.
_HINTED_CODES = (exit_codes.ERROR_AUTH_FAILURE, exit_codes.ERROR_NETWORK)


def _require_auth() -> None:
    """Require a saved API token."""
    if not AuthService.is_authenticated():
        format_error("Not logged in. Use 'tasknest login <token>' to authenticate.")
        raise typer.Exit(1)


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = True):
    """Decorator to wrap command functions with common functionality.

    Runs async commands with asyncio, logs start/finish with timing, and
    turns TaskNestError into an error message and its exit code.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if auth_required:
                    _require_auth()

                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except TaskNestError as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) %s - %s",
                    cmd,
                    elapsed,
                    exit_codes.get_exit_code_name(e.exit_code),
                    e.message,
                )
                format_error(e.message)
                if e.exit_code in _HINTED_CODES:
                    format_info(exit_codes.get_exit_code_description(e.exit_code))
                raise typer.Exit(code=e.exit_code) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=1) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
