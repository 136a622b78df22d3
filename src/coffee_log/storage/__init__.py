"""Local storage backends for the coffee log."""

from coffee_log.storage.base import LocalStore
from coffee_log.storage.factory import create_store
from coffee_log.storage.memory_store import InMemoryStore
from coffee_log.storage.sqlite_store import SQLiteStore

__all__ = [
    "LocalStore",
    "InMemoryStore",
    "SQLiteStore",
    "create_store",
]
