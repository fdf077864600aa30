"""In-process single-flight: one in-flight computation per key."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class SingleFlight:
    """Share one running computation among concurrent callers of the same key.

    Only deduplicates inside one process (one event loop). The entry is
    removed as soon as the computation finishes, so later callers start a
    fresh one. A failure is delivered to every waiter.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._inflight)

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run fn for key, or join the computation already running for it."""
        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(fn())
            self._inflight[key] = future
            future.add_done_callback(lambda f: self._forget(key, f))
        # shield: a cancelled waiter must not cancel the shared computation
        return await asyncio.shield(future)

    def _forget(self, key: str, future: asyncio.Future[Any]) -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        if not future.cancelled():
            # mark retrieved so an unobserved failure is not logged by asyncio
            future.exception()
