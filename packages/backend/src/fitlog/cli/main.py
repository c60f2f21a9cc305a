"""Fitlog CLI — run the server, migrate the schema, talk to the API.

Usage:
    fitlog serve                              # uvicorn fitlog.main:app
    fitlog migrate                            # alembic upgrade head
    fitlog register alice alice@example.com   # prompts for a password
    fitlog login alice                        # prints a bearer token
    fitlog whoami --token <TOKEN>             # GET /users/me
    fitlog workout 42                         # show workout #42
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from fitlog import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8080"


def _api_url() -> str:
    return os.environ.get("FITLOG_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the fitlog API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _fail(response: httpx.Response) -> None:
    """Print the API's error detail and exit non-zero."""
    try:
        detail = response.json().get("detail", response.text)
    except ValueError:
        detail = response.text
    click.secho(f"Error {response.status_code}: {detail}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="fitlog")
def main():
    """Fitlog — workout tracking service."""


# ---------------------------------------------------------------------------
# Server-side commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: FITLOG_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: FITLOG_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from fitlog.config import settings

    uvicorn.run(
        "fitlog.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command()
@click.option("--revision", default="head", show_default=True)
def migrate(revision: str):
    """Apply database migrations."""
    from alembic import command
    from alembic.config import Config

    cfg = Config()
    cfg.set_main_option(
        "script_location", str(Path(__file__).resolve().parent.parent / "db" / "migrations")
    )
    command.upgrade(cfg, revision)
    click.secho(f"Database migrated to {revision}", fg="green")


# ---------------------------------------------------------------------------
# API client commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("username")
@click.argument("email")
@click.option("--bio", default="", help="Short profile text")
@click.password_option()
def register(username: str, email: str, bio: str, password: str):
    """Create an account."""
    asyncio.run(_register_impl(username, email, bio, password))


async def _register_impl(username: str, email: str, bio: str, password: str):
    async with _client() as c:
        r = await c.post(
            "/api/v1/users",
            json={"username": username, "email": email, "password": password, "bio": bio},
        )
    if r.status_code != 201:
        _fail(r)
    user = r.json()
    click.secho(f"Registered {user['username']} (id {user['id']})", fg="green")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
def login(username: str, password: str):
    """Log in and print a bearer token (export it as FITLOG_TOKEN)."""
    asyncio.run(_login_impl(username, password))


async def _login_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post(
            "/api/v1/tokens/authentication",
            json={"username": username, "password": password},
        )
    if r.status_code != 201:
        _fail(r)
    body = r.json()
    click.echo(body["token"])
    click.secho(f"Expires {body['expiry']}", fg="cyan", err=True)


@main.command()
@click.option("--token", envvar="FITLOG_TOKEN", required=True, help="Bearer token")
def whoami(token: str):
    """Show the account the token belongs to."""
    asyncio.run(_whoami_impl(token))


async def _whoami_impl(token: str):
    async with _client(token) as c:
        r = await c.get("/api/v1/users/me")
    if r.status_code != 200:
        _fail(r)
    click.echo(_pretty_json(r.json()))


@main.command()
@click.argument("workout_id", type=int)
def workout(workout_id: int):
    """Show one workout with its entries."""
    asyncio.run(_workout_impl(workout_id))


async def _workout_impl(workout_id: int):
    async with _client() as c:
        r = await c.get(f"/api/v1/workouts/{workout_id}")
    if r.status_code != 200:
        _fail(r)
    w = r.json()
    click.secho(f"#{w['id']} {w['title']}", bold=True)
    click.echo(f"{w['duration_minutes']} min, {w['calories_burned']} kcal")
    for e in w["entries"]:
        amount = f"{e['reps']} reps" if e["reps"] is not None else f"{e['duration_seconds']}s"
        weight = f" @ {e['weight']}" if e["weight"] is not None else ""
        click.echo(f"  {e['order_index']}. {e['exercise_name']}: {e['sets']} x {amount}{weight}")


if __name__ == "__main__":
    main()
