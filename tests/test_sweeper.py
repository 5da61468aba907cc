"""
Tests for the idle-room sweeper.
"""

import asyncio
import time

from boredom_dial.store import RoomRegistry
from boredom_dial.sweeper import RoomSweeper

from fakes import FakeConnection


class TestRoomSweeper:
    def setup_method(self):
        self.registry = RoomRegistry()

    def test_sweep_evicts_idle_rooms(self):
        sweeper = RoomSweeper(self.registry, interval=60, idle_threshold=3600)
        idle = self.registry.create_room()
        occupied = self.registry.create_room()
        self.registry.add_participant(occupied, connection=FakeConnection())
        later = time.time() + 7200

        assert sweeper.sweep(now=later) == [idle.room_id]
        assert self.registry.get_room(occupied.room_id) is occupied
        assert self.registry.get_room("global") is not None

    def test_young_rooms_survive(self):
        sweeper = RoomSweeper(self.registry, interval=60, idle_threshold=3600)
        room = self.registry.create_room()

        assert sweeper.sweep() == []
        assert self.registry.get_room(room.room_id) is room

    async def test_runs_periodically(self):
        sweeper = RoomSweeper(self.registry, interval=0.01, idle_threshold=1)
        room = self.registry.create_room()
        room.created_at -= 10

        sweeper.start()
        try:
            for _ in range(100):
                if self.registry.get_room(room.room_id) is None:
                    break
                await asyncio.sleep(0.01)
        finally:
            await sweeper.stop()

        assert self.registry.get_room(room.room_id) is None
        assert self.registry.room_count == 1
