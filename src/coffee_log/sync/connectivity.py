"""Connectivity signals: report reachable/unreachable network transitions."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

import aiohttp

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], None]


class ConnectivityMonitor:
    """
    Holds the current reachability and notifies listeners on transitions.

    Listeners are called with the new value only when it differs from the
    previous one. Subclasses (or the host application) feed observations
    through ``set_reachable``.
    """

    def __init__(self, reachable: bool = True) -> None:
        self._reachable = reachable
        self._listeners: list[ConnectivityListener] = []

    @property
    def is_reachable(self) -> bool:
        return self._reachable

    def add_listener(self, listener: ConnectivityListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ConnectivityListener) -> None:
        self._listeners = [cb for cb in self._listeners if cb != listener]

    def set_reachable(self, reachable: bool) -> None:
        """Record an observation; notify listeners if it is a transition."""
        if reachable == self._reachable:
            return
        self._reachable = reachable
        logger.info("Connectivity changed: %s", "reachable" if reachable else "unreachable")

        # Copy so a listener may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(reachable)
            except Exception:
                logger.warning("Connectivity listener failed", exc_info=True)


class HttpProbeConnectivity(ConnectivityMonitor):
    """
    Polls an HTTP endpoint and reports whether the backend answers.

    Any HTTP response counts as reachable (an auth error still proves the
    network path works); connection errors and timeouts count as
    unreachable.

    Usage:
        monitor = HttpProbeConnectivity("http://localhost:8080/api/entries")
        await monitor.start()
        ...
        await monitor.stop()
    """

    def __init__(
        self,
        url: str,
        *,
        interval: float = 15.0,
        timeout: float = 5.0,
        reachable: bool = False,
    ) -> None:
        super().__init__(reachable=reachable)
        if not url.startswith(("http://", "https://")):
            raise ValueError("Invalid probe URL scheme: must start with http:// or https://")
        self._url = url
        self._interval = interval
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def probe(self) -> bool:
        """Probe once, update state, and return the observation."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        try:
            async with self._session.head(self._url, allow_redirects=False):
                reachable = True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Probe of %s failed: %s", self._url, e)
            reachable = False
        self.set_reachable(reachable)
        return reachable

    async def start(self) -> None:
        """Probe immediately, then keep probing in the background."""
        if self.is_running:
            return
        await self.probe()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._session:
            await self._session.close()
            self._session = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.probe()
