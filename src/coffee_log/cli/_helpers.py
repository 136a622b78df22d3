"""Shared CLI helpers for configuration, sessions, and output formatting."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

import typer

from coffee_log.journal import Journal
from coffee_log.remote.http_client import HttpRemoteClient
from coffee_log.storage.base import LocalStore
from coffee_log.storage.factory import create_store
from coffee_log.sync.connectivity import HttpProbeConnectivity
from coffee_log.sync.protocol import SyncResult, SyncState
from coffee_log.sync.sync_engine import SyncEngine
from coffee_log.utils.config import Config, get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STATE_COLORS = {
    SyncState.IDLE: typer.colors.GREEN,
    SyncState.SYNCING: typer.colors.CYAN,
    SyncState.OFFLINE: typer.colors.YELLOW,
}


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async CLI command.

    Yields once after the command so aiosqlite's worker thread callbacks
    drain before ``asyncio.run`` tears the loop down.
    """

    async def _with_cleanup() -> T:
        try:
            return await coro
        finally:
            await asyncio.sleep(0)

    return asyncio.run(_with_cleanup())


@dataclass
class Session:
    """Everything a command needs, wired from configuration."""

    config: Config
    store: LocalStore
    remote: HttpRemoteClient
    connectivity: HttpProbeConnectivity
    engine: SyncEngine
    journal: Journal


@asynccontextmanager
async def open_session(config: Config | None = None) -> AsyncIterator[Session]:
    """Open store, remote client and engine; close them on exit."""
    config = config or get_config()
    store = await create_store(config)
    remote = HttpRemoteClient(config.server_url, token=config.api_token, timeout=config.timeout)
    connectivity = HttpProbeConnectivity(
        f"{config.server_url}{config.probe_path}",
        interval=config.probe_interval,
        timeout=min(config.timeout, 5.0),
    )
    engine = SyncEngine(store, remote, connectivity)
    journal = Journal(store, engine, auto_sync=False)
    try:
        yield Session(
            config=config,
            store=store,
            remote=remote,
            connectivity=connectivity,
            engine=engine,
            journal=journal,
        )
    finally:
        await connectivity.stop()
        await remote.close()
        await store.close()


async def sync_now(session: Session) -> SyncResult:
    """Probe the backend once, then run a single pass."""
    await session.connectivity.probe()
    return await session.engine.sync_once()


def output_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def echo_sync_result(result: SyncResult) -> None:
    """Print a one-line human summary of a sync pass."""
    color = _STATE_COLORS.get(result.state, typer.colors.WHITE)
    if not result.ran:
        typer.secho(
            f"[{result.state.upper()}] Not synced; {result.remaining} change(s) queued",
            fg=color,
        )
        return
    if result.error:
        typer.secho(f"[{result.state.upper()}] Sync failed: {result.error}", fg=color)
        typer.echo(f"  Synced: {result.drained}  Still queued: {result.remaining}")
        return
    typer.secho(f"[{result.state.upper()}] Synced", fg=color)
    typer.echo(f"  Pushed: {result.drained}  Entries: {result.entry_count}")


def result_to_dict(result: SyncResult) -> dict[str, Any]:
    return {
        "ran": result.ran,
        "state": result.state.value,
        "drained": result.drained,
        "remaining": result.remaining,
        "reconciled": result.reconciled,
        "entry_count": result.entry_count,
        "error": result.error,
        "error_kind": result.error_kind,
    }
