"""Unit tests for the 'projects' command group."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from tasknest.main import app
from tasknest.models import Project

runner = CliRunner()

_NOW = datetime(2024, 6, 1, 10, 0, tzinfo=UTC)


@pytest.fixture()
def store():
    mock = MagicMock()
    mock.list_projects = AsyncMock(
        return_value=[Project(id="inbox-1", name="Inbox", is_inbox=True, created_at=_NOW, updated_at=_NOW)]
    )
    mock.projects_api.create_project = AsyncMock(return_value={"id": "p2", "name": "Garden"})
    mock.projects_api.list_activity = AsyncMock(
        return_value=[{"id": "a1", "action": "created: Water", "entityType": "task"}]
    )
    mock.close = AsyncMock()
    with patch("tasknest.commands.decorators._require_auth"):
        with patch("tasknest.commands.utils.get_task_store", return_value=mock):
            yield mock


def test_list_projects(store):
    result = runner.invoke(app, ["projects", "list", "-o", "json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data[0]["isInbox"] is True
    store.close.assert_awaited_once()


def test_create_project(store):
    result = runner.invoke(app, ["projects", "create", "Garden", "--color", "green", "--favorite"])

    assert result.exit_code == 0, result.output
    store.projects_api.create_project.assert_awaited_once_with("Garden", color="green", is_favorite=True)
    assert "Garden" in result.output


def test_activity(store):
    result = runner.invoke(app, ["projects", "activity", "-o", "json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)[0]["action"] == "created: Water"


def test_not_logged_in(tmp_config):
    result = runner.invoke(app, ["projects", "list"])

    assert result.exit_code == 1
    assert "Not logged in" in result.output
