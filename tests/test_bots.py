"""
Tests for the simulated participant driver.
"""

import asyncio

import pytest

from boredom_dial.bots import DEFAULT_BOT_PROFILES, BotDriver
from boredom_dial.broadcast import Broadcaster
from boredom_dial.store import RoomRegistry

from fakes import FakeConnection, FixedRandom


class TestBotDriver:
    def setup_method(self):
        self.registry = RoomRegistry(DEFAULT_BOT_PROFILES)
        self.broadcaster = Broadcaster(self.registry)

    def _driver(self, draw: float, profiles=DEFAULT_BOT_PROFILES) -> BotDriver:
        return BotDriver(self.registry, self.broadcaster, profiles, rng=FixedRandom(draw))

    def test_default_roster(self):
        assert [p.id for p in DEFAULT_BOT_PROFILES] == [
            "bot-restless",
            "bot-chill",
            "bot-moody",
            "bot-sleepy",
        ]
        assert {p.interval for p in DEFAULT_BOT_PROFILES} == {3, 7, 4, 10}

    def test_drifts_a_tenth_toward_target(self):
        """With a neutral draw the bot closes 10% of the gap."""
        profile = DEFAULT_BOT_PROFILES[0]  # target 65
        bot = self.registry.global_room.participants[profile.id]
        bot.value = 15

        new_value = self._driver(0.5).tick(profile)

        assert new_value == pytest.approx(20)
        assert bot.value == pytest.approx(20)

    def test_noise_is_scaled_by_volatility(self):
        profile = DEFAULT_BOT_PROFILES[2]  # target 50, volatility 25
        bot = self.registry.global_room.participants[profile.id]
        bot.value = 50

        assert self._driver(1.0).tick(profile) == pytest.approx(62.5)
        bot.value = 50
        assert self._driver(0.0).tick(profile) == pytest.approx(37.5)

    def test_value_is_clamped_not_rounded(self):
        profile = DEFAULT_BOT_PROFILES[3]  # target 80, volatility 10
        bot = self.registry.global_room.participants[profile.id]

        bot.value = 99
        assert self._driver(1.0).tick(profile) == 100

        chill = DEFAULT_BOT_PROFILES[1]  # target 25, volatility 8
        self.registry.global_room.participants[chill.id].value = 0
        assert self._driver(0.0).tick(chill) == 0

        bot.value = 33.3
        value = self._driver(0.5).tick(profile)
        assert value == pytest.approx(33.3 + (80 - 33.3) * 0.1)
        assert value != round(value)

    def test_tick_broadcasts_global_room(self):
        viewer = FakeConnection()
        self.registry.add_participant(self.registry.global_room, connection=viewer)

        self._driver(0.5).tick(DEFAULT_BOT_PROFILES[0])

        assert len(viewer.messages) == 1
        assert viewer.messages[0]["roomId"] == "global"
        assert viewer.messages[0]["count"] == len(DEFAULT_BOT_PROFILES) + 1

    def test_missing_bot_is_skipped(self):
        profile = DEFAULT_BOT_PROFILES[0]
        viewer = FakeConnection()
        self.registry.add_participant(self.registry.global_room, connection=viewer)
        del self.registry.global_room.participants[profile.id]

        assert self._driver(0.5).tick(profile) is None
        assert viewer.payloads == []

    async def test_tasks_tick_until_stopped(self, profile):
        registry = RoomRegistry([profile])
        driver = BotDriver(registry, Broadcaster(registry), (profile,), rng=FixedRandom(0.5))
        bot = registry.global_room.participants[profile.id]
        bot.value = 0

        driver.start()
        await asyncio.sleep(0.1)
        await driver.stop()

        ticked = bot.value
        assert 0 < ticked < profile.target

        # No more ticks after stop
        await asyncio.sleep(0.05)
        assert bot.value == ticked
