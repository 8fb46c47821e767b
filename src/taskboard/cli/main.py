"""Taskboard CLI — database setup and admin bootstrapping.

Usage:
    taskboard init-db                                  # Create tables
    taskboard create-admin admin@example.com -n Admin  # Create an ADMIN account
    taskboard promote user@example.com                 # Make an existing user ADMIN
    taskboard users                                    # List accounts
    taskboard serve --reload                           # Run the API under uvicorn

Registration through the API always creates USER accounts, so the first
administrator has to come from here.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from taskboard import __version__
from taskboard.config import settings
from taskboard.db.engine import Database
from taskboard.db.models import Role
from taskboard.errors import DuplicateEmail
from taskboard.services.user_service import UserService

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
        # No running loop — normal CLI invocation
        return asyncio.run(coro)
    else:
        # Already inside an event loop (e.g. test runner) — run in a thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


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


async def _with_users(database_url: str, fn):
    """Open a Database, hand a UserService to `fn`, always dispose."""
    database = Database(database_url)
    try:
        await database.create_tables()
        async with database.session_factory() as session:
            return await fn(UserService(session))
    finally:
        await database.dispose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskboard")
@click.option(
    "--database-url",
    envvar="TASKBOARD_DATABASE_URL",
    default=settings.database_url,
    show_default=False,
    help="SQLAlchemy async URL (default: TASKBOARD_DATABASE_URL)",
)
@click.pass_context
def main(ctx: click.Context, database_url: str):
    """Taskboard — shared todo tracking API."""
    ctx.obj = {"database_url": database_url}


@main.command("init-db")
@click.pass_obj
def init_db(obj: dict):
    """Create all tables (no-op for tables that already exist)."""

    async def _impl():
        database = Database(obj["database_url"])
        try:
            await database.create_tables()
        finally:
            await database.dispose()

    _run(_impl())
    click.secho("Tables created", fg="green")


@main.command("create-admin")
@click.argument("email")
@click.option("--name", "-n", default="Administrator", help="Display name")
@click.password_option(help="Password (prompted if omitted)")
@click.pass_obj
def create_admin(obj: dict, email: str, name: str, password: str):
    """Create an ADMIN account."""
    if len(password) < 6:
        click.secho("Error: password must be at least 6 characters", fg="red", err=True)
        sys.exit(1)

    async def _impl(svc: UserService):
        return await svc.create_user(email, password, name, role=Role.ADMIN)

    try:
        user = _run(_with_users(obj["database_url"], _impl))
    except DuplicateEmail:
        click.secho(f"Error: {email} is already registered", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Admin #{user.id} created: {user.email}", fg="green")


@main.command()
@click.argument("email")
@click.option("--demote", is_flag=True, help="Set role back to USER instead")
@click.pass_obj
def promote(obj: dict, email: str, demote: bool):
    """Make an existing user an ADMIN (or a USER with --demote)."""
    role = Role.USER if demote else Role.ADMIN

    async def _impl(svc: UserService) -> Optional[str]:
        user = await svc.get_by_email(email)
        if not user:
            return None
        # count_admins locks the ADMIN rows until the commit below
        if demote and user.role == Role.ADMIN and await svc.count_admins() <= 1:
            return "last-admin"
        user.role = role
        await svc.db.commit()
        return "ok"

    outcome = _run(_with_users(obj["database_url"], _impl))
    if outcome is None:
        click.secho(f"Error: no user with email {email}", fg="red", err=True)
        sys.exit(1)
    if outcome == "last-admin":
        click.secho("Error: cannot demote the last administrator", fg="red", err=True)
        sys.exit(1)
    click.secho(f"{email} is now {role.value}", fg="green")


@main.command()
@click.pass_obj
def users(obj: dict):
    """List accounts."""

    async def _impl(svc: UserService):
        return [
            {"id": u.id, "email": u.email, "name": u.name, "role": u.role.value}
            for u in await svc.list_users()
        ]

    rows = _run(_with_users(obj["database_url"], _impl))
    if not rows:
        click.echo("No users.")
        return
    _print_table(rows, [("ID", "id", 6), ("EMAIL", "email", 32), ("NAME", "name", 20), ("ROLE", "role", 6)])


@main.command()
@click.option("--host", default=settings.host, show_default=True)
@click.option("--port", default=settings.port, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the API server (uvicorn)."""
    import uvicorn

    uvicorn.run("taskboard.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
