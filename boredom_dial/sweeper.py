"""
Periodic eviction of idle rooms.
"""

import asyncio
import logging

from .store import RoomRegistry

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL = 60.0
DEFAULT_IDLE_THRESHOLD = 3600.0


class RoomSweeper:
    """Evicts rooms without live participants once they pass the idle threshold."""

    def __init__(
        self,
        registry: RoomRegistry,
        interval: float = DEFAULT_SWEEP_INTERVAL,
        idle_threshold: float = DEFAULT_IDLE_THRESHOLD,
    ) -> None:
        self.registry = registry
        self.interval = interval
        self.idle_threshold = idle_threshold
        self._task: asyncio.Task[None] | None = None

    def sweep(self, now: float | None = None) -> list[str]:
        evicted = self.registry.evict_idle_rooms(self.idle_threshold, now=now)
        for room_id in evicted:
            logger.info("Cleaned up empty room: %s", room_id)
        return evicted

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="room-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Room sweep failed")
