"""Store availability tracking and background connection monitoring.

AvailabilityTracker is the synchronous gate in front of every store call.
It is fed lifecycle signals (connect, error, end) by CacheService and by
ConnectionMonitor, which pings the store periodically so that availability
comes back on its own after an outage.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class AvailabilityTracker:
    """Connected flag plus an open-handle check; both must hold.

    Args:
        handle_open: Zero-arg callable returning True while the client handle
            is open. Must not do I/O.
        name: Label used in log messages.
    """

    def __init__(self, handle_open: Callable[[], bool], name: str = "redis") -> None:
        self._handle_open = handle_open
        self._connected = False
        self.name = name

    @property
    def connected(self) -> bool:
        return self._connected

    def available(self) -> bool:
        """Return True if a store call should be attempted. No I/O."""
        return self._connected and self._handle_open()

    def on_connect(self) -> None:
        if not self._connected:
            logger.info("Cache store %s connected", self.name)
        self._connected = True

    def on_error(self, exc: BaseException | None = None) -> None:
        if self._connected:
            logger.warning(
                "Cache store %s unavailable: %s. Cache disabled until reconnect.",
                self.name,
                exc,
            )
        self._connected = False

    def on_end(self) -> None:
        if self._connected:
            logger.info("Cache store %s disconnected", self.name)
        self._connected = False


class ConnectionMonitor:
    """Background task that pings the store and feeds the tracker.

    A successful ping signals connect; a Redis or socket error signals error.
    Start once after the initial connect; stop on shutdown.
    """

    def __init__(
        self,
        ping: Callable[[], Awaitable[object]],
        tracker: AvailabilityTracker,
        interval: float,
    ) -> None:
        self._ping = ping
        self._tracker = tracker
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check(self) -> bool:
        """Ping once and update the tracker. Returns the resulting availability."""
        try:
            await self._ping()
        except (redis.RedisError, OSError) as e:
            self._tracker.on_error(e)
            return False
        self._tracker.on_connect()
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.check()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
