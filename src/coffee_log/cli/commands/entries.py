"""Entry commands: add, edit, delete, list."""

from __future__ import annotations

from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from coffee_log.cli._helpers import (
    echo_sync_result,
    open_session,
    output_json,
    result_to_dict,
    run_async,
    sync_now,
)
from coffee_log.core.entry import Entry
from coffee_log.errors import EntryValidationError
from coffee_log.utils.timeutils import now_iso

console = Console()

SyncOption = Annotated[
    bool, typer.Option("--sync/--no-sync", help="Try to sync right after the change")
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


def add(
    beans: Annotated[str, typer.Argument(help="Beans, e.g. 'Ethiopia Yirgacheffe'")],
    brew_method: Annotated[str, typer.Argument(help="Brew method, e.g. pour_over")],
    rating: Annotated[int, typer.Option("--rating", "-r", min=0, max=5, help="Rating 0-5")] = 0,
    notes: Annotated[str, typer.Option("--notes", "-n", help="Tasting notes")] = "",
    brewed_at: Annotated[
        str | None, typer.Option("--brewed-at", help="RFC 3339 brew time (default: now)")
    ] = None,
    sync: SyncOption = True,
    json_output: JsonOption = False,
) -> None:
    """Log a new brew.

    Examples:
        coffeelog add "Yirgacheffe" pour_over --rating 4
        coffeelog add "Kenya AA" espresso -n "bright, jammy" --no-sync
    """

    async def _add() -> dict[str, Any]:
        async with open_session() as session:
            entry = await session.journal.add_entry(
                beans,
                brew_method,
                brewed_at or now_iso(),
                notes=notes,
                rating=rating,
            )
            result = await sync_now(session) if sync else None
            stored = await session.journal.get_entry(entry.id) or entry
            return {"entry": stored, "sync": result}

    try:
        data = run_async(_add())
    except EntryValidationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(1) from e

    _print_change("Logged", data, json_output)


def edit(
    entry_id: Annotated[str, typer.Argument(help="Entry ID")],
    beans: Annotated[str | None, typer.Option("--beans", help="New beans")] = None,
    brew_method: Annotated[str | None, typer.Option("--method", help="New brew method")] = None,
    rating: Annotated[
        int | None, typer.Option("--rating", "-r", min=0, max=5, help="New rating 0-5")
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", "-n", help="New notes")] = None,
    brewed_at: Annotated[str | None, typer.Option("--brewed-at", help="New brew time")] = None,
    sync: SyncOption = True,
    json_output: JsonOption = False,
) -> None:
    """Edit a logged brew.

    Examples:
        coffeelog edit 5f0c... --rating 5 --notes "even better iced"
    """
    changes = {
        key: value
        for key, value in {
            "beans": beans,
            "brew_method": brew_method,
            "rating": rating,
            "notes": notes,
            "brewed_at": brewed_at,
        }.items()
        if value is not None
    }
    if not changes:
        typer.secho("Nothing to change.", fg=typer.colors.YELLOW)
        raise typer.Exit(1)

    async def _edit() -> dict[str, Any]:
        async with open_session() as session:
            entry = await session.journal.edit_entry(entry_id, **changes)
            result = await sync_now(session) if sync else None
            stored = await session.journal.get_entry(entry.id) or entry
            return {"entry": stored, "sync": result}

    try:
        data = run_async(_edit())
    except KeyError as e:
        typer.secho(f"Error: no entry {entry_id}", fg=typer.colors.RED)
        raise typer.Exit(1) from e
    except EntryValidationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(1) from e

    _print_change("Updated", data, json_output)


def delete(
    entry_id: Annotated[str, typer.Argument(help="Entry ID")],
    sync: SyncOption = True,
    json_output: JsonOption = False,
) -> None:
    """Delete a logged brew.

    Examples:
        coffeelog delete 5f0c...
    """

    async def _delete() -> dict[str, Any]:
        async with open_session() as session:
            await session.journal.delete_entry(entry_id)
            result = await sync_now(session) if sync else None
            return {"entry": None, "sync": result}

    data = run_async(_delete())
    if json_output:
        output_json(
            {
                "deleted": entry_id,
                "sync": result_to_dict(data["sync"]) if data["sync"] else None,
            }
        )
        return
    typer.secho(f"Deleted {entry_id}", fg=typer.colors.GREEN)
    if data["sync"]:
        echo_sync_result(data["sync"])


def list_entries(
    limit: Annotated[int, typer.Option("--limit", "-l", help="Max entries to show")] = 20,
    json_output: JsonOption = False,
) -> None:
    """List logged brews, newest first.

    Examples:
        coffeelog list
        coffeelog list --limit 5 --json
    """

    async def _list() -> list[Entry]:
        async with open_session() as session:
            return await session.journal.list_entries()

    entries = run_async(_list())[:limit]

    if json_output:
        output_json([entry.to_dict() for entry in entries])
        return

    if not entries:
        typer.echo("No entries yet. Start with your first brew.")
        return

    table = Table(title="Recent Brews")
    table.add_column("Brewed", style="cyan")
    table.add_column("Beans")
    table.add_column("Method")
    table.add_column("Rating", justify="right")
    table.add_column("Status")
    table.add_column("ID", style="dim")
    for entry in entries:
        table.add_row(
            entry.brewed_at,
            entry.beans,
            entry.brew_method,
            "*" * entry.rating,
            "[yellow]pending[/yellow]" if entry.is_pending else "[green]synced[/green]",
            entry.id,
        )
    console.print(table)


def _print_change(verb: str, data: dict[str, Any], json_output: bool) -> None:
    entry: Entry = data["entry"]
    if json_output:
        output_json(
            {
                "entry": entry.to_dict(),
                "sync": result_to_dict(data["sync"]) if data["sync"] else None,
            }
        )
        return
    typer.secho(f"{verb} {entry.beans} ({entry.brew_method})", fg=typer.colors.GREEN)
    typer.echo(f"  ID: {entry.id}")
    typer.echo(f"  Status: {entry.sync_status}")
    if data["sync"]:
        echo_sync_result(data["sync"])


def register(app: typer.Typer) -> None:
    """Register entry commands on the app."""
    app.command()(add)
    app.command()(edit)
    app.command()(delete)
    app.command("list")(list_entries)
