"""
Simulated participants for the global room.

Each bot drifts toward its target value by a tenth of the remaining distance
per tick, plus a symmetric random nudge scaled by its volatility. Every tick
triggers a broadcast of the global room.
"""

import asyncio
import logging
import random

from .broadcast import Broadcaster
from .models import BotProfile
from .stats import clamp
from .store import GLOBAL_ROOM_ID, RoomRegistry

logger = logging.getLogger(__name__)

DRIFT_RATE = 0.1

DEFAULT_BOT_PROFILES: tuple[BotProfile, ...] = (
    BotProfile(id="bot-restless", name="Restless Rita", target=65, volatility=15, interval=3),
    BotProfile(id="bot-chill", name="Chill Charlie", target=25, volatility=8, interval=7),
    BotProfile(id="bot-moody", name="Moody Morgan", target=50, volatility=25, interval=4),
    BotProfile(id="bot-sleepy", name="Sleepy Sam", target=80, volatility=10, interval=10),
)


class BotDriver:
    """Runs one periodic task per bot profile."""

    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster: Broadcaster,
        profiles: tuple[BotProfile, ...] = DEFAULT_BOT_PROFILES,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.broadcaster = broadcaster
        self.profiles = profiles
        self._rng = rng or random.Random()
        self._tasks: list[asyncio.Task[None]] = []

    def tick(self, profile: BotProfile) -> float | None:
        """
        Advance one bot by a single step and broadcast the global room.

        Returns:
            The bot's new value, or None if the bot is not in the global room
        """
        room = self.registry.get_room(GLOBAL_ROOM_ID)
        participant = room.participants.get(profile.id) if room else None
        if participant is None:
            return None

        drift = (profile.target - participant.value) * DRIFT_RATE
        noise = (self._rng.random() - 0.5) * profile.volatility
        participant.value = clamp(participant.value + drift + noise)

        self.broadcaster.broadcast(room.room_id)
        return participant.value

    def start(self) -> None:
        if self._tasks:
            return
        for profile in self.profiles:
            task = asyncio.create_task(self._run(profile), name=f"bot:{profile.id}")
            self._tasks.append(task)
        logger.info("Started %d simulated participants", len(self._tasks))

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def _run(self, profile: BotProfile) -> None:
        while True:
            await asyncio.sleep(profile.interval)
            try:
                self.tick(profile)
            except Exception:
                logger.exception("Tick failed for bot %s", profile.id)
