"""CLI tests — click commands against a fake API (httpx.MockTransport).

Learn: The client commands all go through cli.main._client(), so
patching it with a MockTransport-backed client lets CliRunner drive
the commands end to end without a server.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from taskboard.cli import main as cli

BOARD_ID = "6f1c2a4e-0000-4000-8000-000000000001"
TASK_ID = "6f1c2a4e-0000-4000-8000-0000000000aa"


@pytest.fixture
def api(monkeypatch):
    """Fake backend. Records requests; responses come from `routes`."""
    calls = []
    routes = {}

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        calls.append((request.method, request.url.path, body, request.headers.get("Authorization")))
        status, payload = routes.get((request.method, request.url.path), (404, {"message": "Not Found"}))
        return httpx.Response(status, json=payload)

    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://api.test", headers=headers
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    monkeypatch.setenv("TASKBOARD_TOKEN", "tok-123")
    return routes, calls


def test_login_prints_token(api, monkeypatch):
    routes, calls = api
    monkeypatch.delenv("TASKBOARD_TOKEN")
    routes[("POST", "/api/auth/login")] = (200, {"token": "fresh-token"})

    result = CliRunner().invoke(cli.main, ["login", "me@example.com", "--password", "Secr3tPass"])
    assert result.exit_code == 0, result.output
    assert "fresh-token" in result.output
    assert calls[0][2] == {"email": "me@example.com", "password": "Secr3tPass"}


def test_login_failure_exits_1(api):
    routes, _ = api
    routes[("POST", "/api/auth/login")] = (401, {"message": "Invalid credentials."})

    result = CliRunner().invoke(cli.main, ["login", "me@example.com", "--password", "nope"])
    assert result.exit_code == 1
    assert "Invalid credentials." in result.output


def test_boards_lists_table(api):
    routes, calls = api
    routes[("GET", "/api/boards")] = (
        200,
        [{"id": BOARD_ID, "name": "Home", "createdAt": "2026-01-01T00:00:00"}],
    )

    result = CliRunner().invoke(cli.main, ["boards"])
    assert result.exit_code == 0, result.output
    assert BOARD_ID in result.output
    assert "Home" in result.output
    assert calls[0][3] == "Bearer tok-123"


def test_boards_empty(api):
    routes, _ = api
    routes[("GET", "/api/boards")] = (200, [])
    result = CliRunner().invoke(cli.main, ["boards"])
    assert "No boards yet." in result.output


def test_commands_need_token(api, monkeypatch):
    monkeypatch.delenv("TASKBOARD_TOKEN")
    result = CliRunner().invoke(cli.main, ["boards"])
    assert result.exit_code == 1
    assert "TASKBOARD_TOKEN" in result.output


def test_add_task_sends_body(api):
    routes, calls = api
    routes[("POST", f"/api/boards/{BOARD_ID}/tasks")] = (
        201,
        {"id": TASK_ID, "status": "inprogress", "progress": 40},
    )

    result = CliRunner().invoke(
        cli.main, ["add-task", BOARD_ID, "Paint fence", "-s", "inprogress", "-p", "40"]
    )
    assert result.exit_code == 0, result.output
    assert "inprogress, 40%" in result.output
    assert calls[0][2] == {"title": "Paint fence", "status": "inprogress", "progress": 40}


def test_tasks_lists_rows(api):
    routes, _ = api
    routes[("GET", f"/api/boards/{BOARD_ID}/tasks")] = (
        200,
        [{"id": TASK_ID, "title": "Paint fence", "status": "done", "progress": 100}],
    )
    result = CliRunner().invoke(cli.main, ["tasks", BOARD_ID])
    assert result.exit_code == 0, result.output
    assert "Paint fence" in result.output
    assert "100" in result.output


def test_move_updates_status_and_progress(api):
    routes, calls = api
    routes[("PUT", f"/api/tasks/{TASK_ID}")] = (
        200,
        {"id": TASK_ID, "status": "inprogress", "progress": 60},
    )

    result = CliRunner().invoke(cli.main, ["move", TASK_ID, "inprogress", "-p", "60"])
    assert result.exit_code == 0, result.output
    assert calls[0][:3] == ("PUT", f"/api/tasks/{TASK_ID}", {"status": "inprogress", "progress": 60})


def test_move_needs_something_to_change(api):
    _, calls = api
    result = CliRunner().invoke(cli.main, ["move", TASK_ID])
    assert result.exit_code == 2
    assert calls == []


def test_add_board_error_message(api):
    routes, _ = api
    routes[("POST", "/api/boards")] = (400, {"message": "Board name is required."})
    result = CliRunner().invoke(cli.main, ["add-board", " "])
    assert result.exit_code == 1
    assert "Board name is required." in result.output
