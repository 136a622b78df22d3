"""Sync commands: sync, status, outbox."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from coffee_log.cli._helpers import (
    echo_sync_result,
    open_session,
    output_json,
    result_to_dict,
    run_async,
    sync_now,
)
from coffee_log.core.outbox import OutboxItem
from coffee_log.sync.protocol import SyncResult

JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


def sync(json_output: JsonOption = False) -> None:
    """Push queued changes and refresh from the server.

    Exits with status 1 when the pass could not complete.

    Examples:
        coffeelog sync
    """

    async def _sync() -> SyncResult:
        async with open_session() as session:
            return await sync_now(session)

    result = run_async(_sync())

    if json_output:
        output_json(result_to_dict(result))
    else:
        echo_sync_result(result)

    if not result.ok:
        raise typer.Exit(1)


def status(json_output: JsonOption = False) -> None:
    """Show queued changes and pending entries without contacting the server.

    Examples:
        coffeelog status
        coffeelog status --json
    """

    async def _status() -> dict[str, Any]:
        async with open_session() as session:
            snapshot = await session.engine.refresh()
            return {
                "server_url": session.config.server_url,
                "storage": session.config.storage_backend,
                "outbox_depth": snapshot.outbox_depth,
                "pending_count": snapshot.pending_count,
            }

    data = run_async(_status())

    if json_output:
        output_json(data)
        return

    if data["outbox_depth"] == 0:
        typer.secho("All synced", fg=typer.colors.GREEN)
    else:
        typer.secho(f"{data['outbox_depth']} change(s) queued", fg=typer.colors.YELLOW)
    typer.echo(f"\nPending entries: {data['pending_count']}")
    typer.echo(f"Server URL: {data['server_url']}")
    typer.echo(f"Storage: {data['storage']}")


def outbox(json_output: JsonOption = False) -> None:
    """List queued changes in the order they will be sent.

    Examples:
        coffeelog outbox
    """

    async def _outbox() -> list[OutboxItem]:
        async with open_session() as session:
            return await session.engine.outbox.list_ordered()

    items = run_async(_outbox())

    if json_output:
        output_json([item.to_dict() for item in items])
        return

    if not items:
        typer.echo("Outbox is empty.")
        return
    for item in items:
        typer.echo(f"{item.queued_at}  {item.action.value:<6}  {item.entry_id}")


def register(app: typer.Typer) -> None:
    """Register sync commands on the app."""
    app.command()(sync)
    app.command()(status)
    app.command()(outbox)
