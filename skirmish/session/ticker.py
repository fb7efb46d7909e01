"""
Tick Runner - Drives time-driven matches from the wall clock.

Action-point recovery and real-time income only happen on ticks. The
runner ticks every active time-driven session on a fixed cadence and
periodically drops idle sessions.
"""

from __future__ import annotations
import asyncio
import logging

from .manager import SessionManager

logger = logging.getLogger(__name__)


class TickRunner:
    """Async driver that ticks sessions on a fixed cadence."""

    def __init__(
        self,
        manager: SessionManager,
        tick_ms: int = 1000,
        max_idle_seconds: float = 3600,
        cleanup_every: int = 60,
    ):
        self.manager = manager
        self.tick_ms = tick_ms
        self.max_idle_seconds = max_idle_seconds
        self.cleanup_every = cleanup_every
        self.ticks = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the tick loop."""
        if self._task:
            return
        logger.info(f"Tick runner started ({self.tick_ms}ms)")
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the tick loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Tick runner stopped")

    def step(self) -> int:
        """Run one tick synchronously. Returns sessions ticked."""
        self.ticks += 1
        ticked = self.manager.tick_all()
        if self.cleanup_every and self.ticks % self.cleanup_every == 0:
            stale = self.manager.cleanup_stale_sessions(self.max_idle_seconds)
            if stale:
                logger.info(f"Dropped {len(stale)} idle session(s)")
        return ticked

    async def _loop(self):
        while True:
            try:
                self.step()
            except Exception:
                logger.exception("Tick failed")
            await asyncio.sleep(self.tick_ms / 1000.0)
