from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

log = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PeriodicTask:
    """
    Calls `tick` every `interval` seconds, interval-timer style: the period
    does not stretch with tick duration, and a tick that would start while
    the previous one is still running is skipped instead of stacked.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        tick: Callable[[], Awaitable[None]],
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.name = name
        self.interval = interval
        self._tick = tick
        self._sleep = sleep
        self._runner: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self.ticks = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def start(self) -> None:
        if self.running:
            return
        log.debug("Starting %s task (every %.1fs)", self.name, self.interval)
        self._runner = asyncio.ensure_future(self._run())

    def cancel(self) -> List[asyncio.Task]:
        """Stop the timer and any tick in flight. Returns the cancelled tasks."""
        cancelled = []
        for task in (self._inflight, self._runner):
            if task is not None and not task.done():
                task.cancel()
                cancelled.append(task)
        if self._runner is not None:
            log.debug("Stopped %s task", self.name)
        self._runner = None
        self._inflight = None
        return cancelled

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval)
            if self.busy:
                self.skipped += 1
                log.debug("%s tick skipped, previous run still in progress", self.name)
                continue
            self.ticks += 1
            self._inflight = asyncio.ensure_future(self._invoke())

    async def _invoke(self) -> None:
        try:
            await self._tick()
        except Exception:
            log.exception("%s tick failed", self.name)
