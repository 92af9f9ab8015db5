"""Start/stop-able periodic task for the particle fade loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger("handart.animation")


class AnimationLoop:
    """Runs a callback once per tick while started.

    Cancellation is a flag: ``stop()`` is idempotent and a stopped loop's
    ``tick()`` does nothing, so no tick can run after the mode that owns
    the loop has been left.

    Usage:
        loop = AnimationLoop(lambda: surface.fade(alpha=0.05))
        loop.start()
        # once per display refresh:
        loop.tick()
        loop.stop()
    """

    def __init__(self, callback: Callable[[], None], interval: float = 1 / 60):
        self._callback = callback
        self.interval = interval
        self._running = False
        self._ticks = 0

    def start(self):
        if not self._running:
            logger.debug("Animation loop started")
        self._running = True

    def stop(self):
        if self._running:
            logger.debug("Animation loop stopped after %d ticks", self._ticks)
        self._running = False

    def tick(self) -> bool:
        """Run one tick. Returns False if the loop is stopped."""
        if not self._running:
            return False
        self._callback()
        self._ticks += 1
        return True

    async def run(self):
        """Tick every ``interval`` seconds until stopped.

        Returns at once if the loop was never started, so a driver task can
        be spawned unconditionally and only does work in the modes that
        start it.
        """
        while self.tick():
            await asyncio.sleep(self.interval)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        return self._ticks
