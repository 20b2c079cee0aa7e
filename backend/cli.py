"""
Pop-up Queue CLI.

Command-line interface for operator tasks: schema setup, bootstrapping the
OWNER account, issuing invites and draining the event outbox.
"""

import asyncio
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import func, select

app = typer.Typer(
    name="popup-queue",
    help="Pop-up Queue operator CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create all tables (for deployments without migrations)."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created/verified[/green]")


@app.command()
def create_owner(
    email: str = typer.Option(..., help="Owner email"),
    name: str = typer.Option("Owner", help="Display name"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create the OWNER account. Other staff join through invites."""
    from fastapi import HTTPException
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import AuthService

    with get_db_context() as db:
        try:
            user = AuthService(db).create_owner(name=name, email=email, password=password)
        except HTTPException as e:
            console.print(f"[red]✗ {e.detail}[/red]")
            raise typer.Exit(1)
    console.print(f"[green]✓ Owner created[/green] id={user.id} email={user.email}")


@app.command()
def create_invite(
    role: str = typer.Argument("WORKER", help="ADMIN or WORKER"),
    expires_in_hours: Optional[int] = typer.Option(None, min=0, help="Hours until the code expires, 0 for never"),
):
    """Issue a single-use signup code."""
    from fastapi import HTTPException
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import InviteService

    with get_db_context() as db:
        try:
            invite = InviteService(db).create_invite(
                role=role,
                created_by_user_id=None,
                expires_in_hours=expires_in_hours,
            )
        except HTTPException as e:
            console.print(f"[red]✗ {e.detail}[/red]")
            raise typer.Exit(1)

    table = Table(title="Invite")
    table.add_column("Code", style="cyan")
    table.add_column("Role", style="green")
    table.add_column("Expires", style="yellow")
    table.add_row(invite.code, invite.role, str(invite.expires_at or "never"))
    console.print(table)


# =============================================================================
# Outbox Commands
# =============================================================================

@app.command()
def outbox_stats():
    """Show outbox event counts by status."""
    from shared.infrastructure.db import get_db_context
    from rest_api.models import OutboxEvent

    with get_db_context() as db:
        rows = db.execute(
            select(OutboxEvent.status, func.count(OutboxEvent.id)).group_by(OutboxEvent.status)
        ).all()

    table = Table(title="Outbox")
    table.add_column("Status", style="cyan")
    table.add_column("Count", style="green")
    for status, count in rows:
        table.add_row(status.value, str(count))
    console.print(table)


@app.command()
def outbox_flush(
    max_batches: int = typer.Option(10, help="Stop after this many batches"),
):
    """Publish pending outbox events now."""
    from rest_api.services.events import process_pending_events_once
    from shared.infrastructure.events import close_redis_pool

    async def _flush() -> int:
        total = 0
        try:
            for _ in range(max_batches):
                published = await process_pending_events_once()
                if not published:
                    break
                total += published
        finally:
            await close_redis_pool()
        return total

    total = asyncio.run(_flush())
    console.print(f"[green]✓ Published {total} events[/green]")


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health():
    """Check database and Redis connectivity."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError
    from shared.infrastructure.db import get_db_context
    from shared.infrastructure.events import check_redis_health, close_redis_pool

    table = Table(title="Dependency Health")
    table.add_column("Dependency", style="cyan")
    table.add_column("Status", style="green")

    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
        table.add_row("Database", "✓ Healthy")
    except SQLAlchemyError as e:
        table.add_row("Database", f"✗ {type(e).__name__}")

    async def _redis() -> bool:
        try:
            return await check_redis_health()
        finally:
            await close_redis_pool()

    table.add_row("Redis", "✓ Healthy" if asyncio.run(_redis()) else "✗ Unreachable")
    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Pop-up Queue Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "1.0.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
