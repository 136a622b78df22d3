"""Storage factory: pick a local store backend from configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from coffee_log.storage.memory_store import InMemoryStore
from coffee_log.storage.sqlite_store import SQLiteStore

if TYPE_CHECKING:
    from coffee_log.storage.base import LocalStore
    from coffee_log.utils.config import Config

logger = logging.getLogger(__name__)


async def create_store(config: Config) -> LocalStore:
    """Create and initialize the store selected by ``config.storage_backend``.

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = config.storage_backend.lower()

    store: LocalStore
    if backend == "memory":
        store = InMemoryStore()
    elif backend == "sqlite":
        db_path = Path(config.sqlite_path) if config.sqlite_path else config.data_dir / "journal.db"
        store = SQLiteStore(db_path)
    else:
        raise ValueError(f"Unknown storage backend: {config.storage_backend!r}")

    await store.initialize()
    logger.debug("Using %s local store", backend)
    return store
