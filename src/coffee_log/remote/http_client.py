"""HTTP remote client for the journal API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from coffee_log.core.entry import Entry
from coffee_log.errors import (
    NetworkError,
    NotFoundError,
    RemoteError,
    RemoteValidationError,
)
from coffee_log.remote.base import RemoteClient

logger = logging.getLogger(__name__)

_VALIDATION_STATUSES = frozenset({400, 422})
_RETRYABLE_STATUSES = frozenset({408, 425, 429})


class HttpRemoteClient(RemoteClient):
    """
    aiohttp-based client for the ``/api/entries`` endpoints.

    Usage:
        async with HttpRemoteClient("http://localhost:8080", token="...") as remote:
            entries = await remote.list()

    Or without context manager:
        remote = HttpRemoteClient("http://localhost:8080")
        await remote.connect()
        try:
            await remote.create(entry.to_payload())
        finally:
            await remote.close()
    """

    def __init__(
        self,
        server_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the client.

        Args:
            server_url: Base URL of the journal backend (e.g., "http://localhost:8080")
            token: Optional bearer token attached to every request
            timeout: Request timeout in seconds
        """
        self._server_url = server_url.rstrip("/")
        self._token = token
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    def set_token(self, token: str | None) -> None:
        """Swap the bearer token used for subsequent requests."""
        self._token = token

    async def connect(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> HttpRemoteClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON body.

        Returns None for empty responses (204).
        """
        if not self._session:
            await self.connect()

        assert self._session is not None

        url = f"{self._server_url}{path}"

        try:
            async with self._session.request(
                method,
                url,
                json=json_data,
                headers=self._get_headers(),
            ) as response:
                if response.status >= 400:
                    raise await _error_from_response(response)
                if response.status == 204:
                    return None
                return await response.json()
        except aiohttp.ClientError as e:
            raise NetworkError(f"Failed to reach {self._server_url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Request to {url} timed out") from e

    # ========== Entry Operations ==========

    async def list(self) -> list[Entry]:
        result = await self._request("GET", "/api/entries")
        return [Entry.from_server(item) for item in result or []]

    async def create(self, payload: dict[str, Any]) -> Entry:
        result = await self._request("POST", "/api/entries", json_data=payload)
        return Entry.from_server(result)

    async def update(self, entry_id: str, payload: dict[str, Any]) -> Entry:
        result = await self._request("PUT", f"/api/entries/{entry_id}", json_data=payload)
        return Entry.from_server(result)

    async def delete(self, entry_id: str) -> None:
        try:
            await self._request("DELETE", f"/api/entries/{entry_id}")
        except NotFoundError:
            logger.debug("Entry %s already absent remotely", entry_id)


async def _error_from_response(response: aiohttp.ClientResponse) -> RemoteError:
    """Classify a non-2xx response, preferring the server's ``error`` message."""
    status = response.status
    message = f"Request failed ({status})"
    try:
        data = await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        message = data["error"]

    if status == 404:
        return NotFoundError(message, status_code=status)
    if status in _VALIDATION_STATUSES:
        return RemoteValidationError(message, status_code=status)
    if status >= 500 or status in _RETRYABLE_STATUSES:
        return NetworkError(message, status_code=status)
    return RemoteError(message, status_code=status)
