"""Minimum-spacing gate for outbound provider requests."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class RateLimiter:
    """Hand out one permit per ``interval`` seconds.

    Permits are scheduled on a fixed grid anchored at the previous permit, so
    an idle limiter yields exactly one immediate slot and never a burst. The
    first call returns without waiting. The internal lock only covers slot
    reservation and the wait for it; callers proceed unlocked afterwards.
    """

    def __init__(
        self,
        interval: float,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.interval = float(interval)
        self._clock = clock
        self._sleep = sleep
        self._next_slot: float | None = None
        self._lock: asyncio.Lock | None = None

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so the limiter can be built outside a running loop.
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def ready(self) -> None:
        """Block until the next permit is available, then consume it."""

        async with self._get_lock():
            now = self._clock()
            slot = now if self._next_slot is None else max(now, self._next_slot)
            if slot > now:
                await self._sleep(slot - now)
                # Late wake-ups push the grid back so no later gap shrinks.
                slot = max(slot, self._clock())
            self._next_slot = slot + self.interval

    def reset(self) -> None:
        """Forget the previous permit so the next call passes immediately."""

        self._next_slot = None


__all__ = ["RateLimiter"]
