"""Unit tests for command decorators."""

from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from tasknest.commands.decorators import _require_auth, command_wrapper
from tasknest.exceptions import NotFoundError, TransportError, Unauthorized, ValidationError

runner = CliRunner()


def _app_for(func) -> typer.Typer:
    app = typer.Typer()
    app.command("run")(func)
    # A second command keeps "run" addressable as a subcommand.
    app.command("noop")(lambda: None)
    return app


class TestRequireAuth:
    def test_authenticated_passes(self):
        with patch("tasknest.commands.decorators.AuthService.is_authenticated", return_value=True):
            _require_auth()

    def test_not_authenticated_exits(self):
        with patch("tasknest.commands.decorators.AuthService.is_authenticated", return_value=False):
            with patch("tasknest.commands.decorators.format_error") as format_error:
                with pytest.raises(typer.Exit):
                    _require_auth()
        assert "tasknest login" in format_error.call_args[0][0]


class TestCommandWrapper:
    def test_runs_sync_function(self):
        @command_wrapper(auth_required=False)
        def run():
            typer.echo("sync ran")

        result = runner.invoke(_app_for(run), ["run"])
        assert result.exit_code == 0
        assert "sync ran" in result.output

    def test_runs_async_function(self):
        @command_wrapper(auth_required=False)
        async def run():
            typer.echo("async ran")

        result = runner.invoke(_app_for(run), ["run"])
        assert result.exit_code == 0
        assert "async ran" in result.output

    def test_bare_decorator_requires_auth(self):
        @command_wrapper
        def run():
            typer.echo("should not run")

        with patch("tasknest.commands.decorators.AuthService.is_authenticated", return_value=False):
            result = runner.invoke(_app_for(run), ["run"])

        assert result.exit_code == 1
        assert "should not run" not in result.output

    @pytest.mark.parametrize(
        "error, code",
        [
            (ValidationError("bad input"), 2),
            (NotFoundError("gone"), 5),
            (TransportError("down"), 4),
        ],
    )
    def test_tasknest_errors_map_to_exit_codes(self, error, code):
        @command_wrapper(auth_required=False)
        async def run():
            raise error

        result = runner.invoke(_app_for(run), ["run"])

        assert result.exit_code == code
        assert error.message in result.output

    @pytest.mark.parametrize(
        "error, hint",
        [
            (Unauthorized("Invalid token"), "run 'tasknest login'"),
            (TransportError("Server unreachable"), "check the server"),
        ],
    )
    def test_auth_and_network_failures_print_a_hint(self, error, hint):
        @command_wrapper(auth_required=False)
        def run():
            raise error

        result = runner.invoke(_app_for(run), ["run"])

        assert hint in result.output

    def test_validation_failure_has_no_hint(self):
        @command_wrapper(auth_required=False)
        def run():
            raise ValidationError("bad input")

        result = runner.invoke(_app_for(run), ["run"])

        assert "Info:" not in result.output

    def test_unexpected_error_exits_one(self):
        @command_wrapper(auth_required=False)
        def run():
            raise RuntimeError("boom")

        result = runner.invoke(_app_for(run), ["run"])

        assert result.exit_code == 1
        assert "An unexpected error occurred: boom" in result.output

    def test_explicit_exit_passes_through(self):
        @command_wrapper(auth_required=False)
        def run():
            raise typer.Exit(code=7)

        result = runner.invoke(_app_for(run), ["run"])
        assert result.exit_code == 7

    def test_preserves_function_name(self):
        @command_wrapper(auth_required=False)
        def my_command():
            """Docstring."""

        assert my_command.__name__ == "my_command"
        assert my_command.__doc__ == "Docstring."
