"""Taskboard CLI — run the server, or work with your boards from a terminal.

Usage:
    taskboard serve                              # Run the API (uvicorn)
    taskboard login you@example.com              # Print a bearer token
    taskboard boards                             # List your boards
    taskboard add-board "Home"                   # Create a board
    taskboard tasks BOARD_ID                     # List a board's tasks
    taskboard add-task BOARD_ID "Buy milk"       # Create a task
    taskboard move TASK_ID inprogress -p 60      # Change status / progress

The client commands read TASKBOARD_TOKEN (from `taskboard login`) and
TASKBOARD_API_URL (default http://localhost:3001).
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3001"


def _api_url() -> str:
    return os.environ.get("TASKBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Taskboard backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _token() -> str:
    token = os.environ.get("TASKBOARD_TOKEN")
    if not token:
        click.secho(
            "Error: TASKBOARD_TOKEN not set. Run `taskboard login EMAIL` first.",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return token


def _check(r: httpx.Response) -> None:
    """Exit with the API's message on any error response."""
    if r.is_success:
        return
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _status_color(status: str) -> str:
    return {"todo": "white", "inprogress": "yellow", "done": "green"}.get(status, "white")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="taskboard")
def main():
    """Taskboard — personal task boards with status and progress."""


@main.command()
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (development)")
def serve(reload: bool):
    """Run the API server. Exits with status 1 if configuration is missing."""
    import uvicorn

    from taskboard.config import load_settings

    settings = load_settings()
    uvicorn.run(
        "taskboard.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# taskboard login
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Log in with EMAIL and print a bearer token."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/auth/login", json={"email": email, "password": password})
        _check(r)
        token = r.json()["token"]
    click.echo(token)
    click.secho(f"export TASKBOARD_TOKEN={token}", fg="cyan", err=True)


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------


@main.command()
def boards():
    """List your boards."""
    _run(_boards_impl())


async def _boards_impl():
    async with _client(_token()) as c:
        r = await c.get("/api/boards")
        _check(r)
        rows = r.json()
    if not rows:
        click.echo("No boards yet.")
        return
    _print_table(rows, [("ID", "id", 36), ("NAME", "name", 30), ("CREATED", "createdAt", 19)])


@main.command("add-board")
@click.argument("name")
def add_board(name: str):
    """Create a board called NAME."""
    _run(_add_board_impl(name))


async def _add_board_impl(name: str):
    async with _client(_token()) as c:
        r = await c.post("/api/boards", json={"name": name})
        _check(r)
        board = r.json()
    click.secho(f"Board {board['id']} created", fg="green")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.command()
@click.argument("board_id")
def tasks(board_id: str):
    """List the tasks on BOARD_ID."""
    _run(_tasks_impl(board_id))


async def _tasks_impl(board_id: str):
    async with _client(_token()) as c:
        r = await c.get(f"/api/boards/{board_id}/tasks")
        _check(r)
        rows = r.json()
    if not rows:
        click.echo("No tasks on this board.")
        return
    click.secho(f"{'ID':<36}  {'STATUS':<10}  {'%':>3}  TITLE", bold=True)
    for t in rows:
        status = click.style(f"{t['status']:<10}", fg=_status_color(t["status"]))
        click.echo(f"{t['id']:<36}  {status}  {t['progress']:>3}  {t['title']}")


@main.command("add-task")
@click.argument("board_id")
@click.argument("title")
@click.option("--description", "-d", help="Longer description")
@click.option(
    "--status", "-s",
    type=click.Choice(["todo", "inprogress", "done"]),
    help="Initial status (default: todo)",
)
@click.option("--progress", "-p", type=click.IntRange(0, 100), help="Initial progress (inprogress only)")
def add_task(board_id: str, title: str, description: Optional[str],
             status: Optional[str], progress: Optional[int]):
    """Create a task called TITLE on BOARD_ID."""
    body = {"title": title}
    if description:
        body["description"] = description
    if status:
        body["status"] = status
    if progress is not None:
        body["progress"] = progress
    _run(_add_task_impl(board_id, body))


async def _add_task_impl(board_id: str, body: dict):
    async with _client(_token()) as c:
        r = await c.post(f"/api/boards/{board_id}/tasks", json=body)
        _check(r)
        task = r.json()
    click.secho(f"Task {task['id']} created ({task['status']}, {task['progress']}%)", fg="green")


@main.command()
@click.argument("task_id")
@click.argument("status", required=False, type=click.Choice(["todo", "inprogress", "done"]))
@click.option("--progress", "-p", type=click.IntRange(0, 100), help="New progress")
def move(task_id: str, status: Optional[str], progress: Optional[int]):
    """Change a task's STATUS and/or progress."""
    body: dict = {}
    if status:
        body["status"] = status
    if progress is not None:
        body["progress"] = progress
    if not body:
        raise click.UsageError("Give a STATUS, --progress, or both.")
    _run(_move_impl(task_id, body))


async def _move_impl(task_id: str, body: dict):
    async with _client(_token()) as c:
        r = await c.put(f"/api/tasks/{task_id}", json=body)
        _check(r)
        task = r.json()
    status = click.style(task["status"], fg=_status_color(task["status"]))
    click.echo(f"Task {task['id']}: {status} {task['progress']}%")
