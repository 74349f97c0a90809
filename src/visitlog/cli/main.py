"""visitlog CLI — run the server, mint tokens, and browse the admin API.

Usage:
    visitlog serve --port 3001                    # Run the API with uvicorn
    visitlog init-db                              # Create tables, seed the initial admin
    visitlog token janedoe@example.com            # Print a bearer token for an email
    visitlog users                                # List users (admin token required)
    visitlog history                              # List visited paths (admin token required)
    visitlog add-user steve@example.com "Steve"   # Create a user

The API commands read the server URL from VISITLOG_API_URL and the
bearer token from --token or VISITLOG_TOKEN.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from visitlog import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3001"


def _api_url() -> str:
    return os.environ.get("VISITLOG_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str]) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the visitlog API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

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


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _fail(r: httpx.Response):
    """Print the API's {"error": ...} message and exit non-zero."""
    try:
        message = r.json().get("error", r.text)
    except ValueError:
        message = r.text
    click.secho(f"Error {r.status_code}: {message}", fg="red", err=True)
    sys.exit(1)


token_option = click.option(
    "--token", envvar="VISITLOG_TOKEN", help="Bearer token (or set VISITLOG_TOKEN)"
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print raw JSON")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="visitlog")
def main():
    """visitlog — record and browse the paths your users visit."""


# ---------------------------------------------------------------------------
# Local commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: VISITLOG_HOST)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: VISITLOG_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from visitlog.config import settings

    uvicorn.run(
        "visitlog.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db_command():
    """Create tables and seed VISITLOG_INITIAL_ADMIN_EMAIL on an empty database."""
    from visitlog.db.engine import engine, init_db

    async def _init():
        try:
            return await init_db(engine)
        finally:
            await engine.dispose()

    user = _run(_init())
    click.secho("Tables ready.", fg="green")
    if user is not None:
        click.echo(f"Created initial admin {user.email} (id {user.id})")


@main.command()
@click.argument("email")
def token(email: str):
    """Print a signed bearer token for EMAIL."""
    from visitlog.auth.jwt import TokenError, create_token

    try:
        click.echo(create_token(email))
    except TokenError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# API commands
# ---------------------------------------------------------------------------


@main.command()
@token_option
@json_option
def users(token: Optional[str], as_json: bool):
    """List all users (admin only)."""
    _run(_users_impl(token, as_json))


async def _users_impl(token: Optional[str], as_json: bool):
    async with _client(token) as c:
        r = await c.get("/admin/users")
    if r.status_code != 200:
        _fail(r)
    data = r.json()
    if as_json:
        click.echo(_pretty_json(data))
        return
    _print_table(
        data,
        [("ID", "id", 12), ("EMAIL", "email", 32), ("NAME", "name", 24), ("ADMIN", "is_admin", 5)],
    )


@main.command()
@token_option
@json_option
def history(token: Optional[str], as_json: bool):
    """List every visited path, newest first (admin only)."""
    _run(_history_impl(token, as_json))


async def _history_impl(token: Optional[str], as_json: bool):
    async with _client(token) as c:
        r = await c.get("/admin/history")
    if r.status_code != 200:
        _fail(r)
    data = r.json()
    if as_json:
        click.echo(_pretty_json(data))
        return
    _print_table(data, [("DATE", "date", 25), ("USER", "user_id", 12), ("PATH", "path", 40)])


@main.command("add-user")
@click.argument("email")
@click.argument("name")
@token_option
def add_user(email: str, name: str, token: Optional[str]):
    """Create a user. On an empty database no token is needed."""
    _run(_add_user_impl(email, name, token))


async def _add_user_impl(email: str, name: str, token: Optional[str]):
    async with _client(token) as c:
        r = await c.post("/admin/users", json={"email": email, "name": name})
    if r.status_code != 201:
        _fail(r)
    user = r.json() if r.content else {}
    role = "admin" if user.get("is_admin") else "user"
    click.secho(f"Created {role} {email} (id {user.get('id', '?')})", fg="green")


if __name__ == "__main__":
    main()
