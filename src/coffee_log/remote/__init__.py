"""Remote clients for the authoritative journal backend."""

from coffee_log.remote.base import RemoteClient
from coffee_log.remote.http_client import HttpRemoteClient

__all__ = ["RemoteClient", "HttpRemoteClient"]
