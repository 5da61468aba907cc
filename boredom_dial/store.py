"""
Room storage implementation for the Boredom Dial service.

This module provides the in-memory room registry. It owns every room and each
room owns its participant table. The registry is an explicit object handed to
every component that needs it, so tests can build isolated instances.

All methods are synchronous and never suspend, so on a single event loop each
call is an atomic step with respect to sessions, bot ticks, sweeps and HTTP
handlers.
"""

import enum
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple, Protocol

from .ids import is_room_code, new_participant_id, new_room_code
from .models import MAX_NAME_LENGTH, BotProfile

logger = logging.getLogger(__name__)

GLOBAL_ROOM_ID = "global"
GLOBAL_ROOM_NAME = "Global Boredom"
DEFAULT_VALUE = 50


class Connection(Protocol):
    """The parts of a live connection the registry and broadcaster rely on."""

    @property
    def is_open(self) -> bool: ...

    def deliver(self, payload: str) -> None: ...

    def request_close(self) -> None: ...


@dataclass
class Participant:
    """One contributor of a value to a room's aggregate."""

    participant_id: str
    value: float = DEFAULT_VALUE
    name: str | None = None
    is_bot: bool = False
    connection: Connection | None = None

    @property
    def is_live(self) -> bool:
        return self.connection is not None


@dataclass
class Room:
    """An isolated namespace of participants aggregated together."""

    room_id: str
    name: str
    created_at: float = field(default_factory=time.time)
    is_global: bool = False
    participants: dict[str, Participant] = field(default_factory=dict)

    def live_participants(self) -> list[Participant]:
        return [p for p in self.participants.values() if p.is_live]


class JoinOutcome(enum.Enum):
    FOUND = "found"
    CREATED = "created"
    FALLBACK = "fallback"


class JoinResolution(NamedTuple):
    outcome: JoinOutcome
    room: Room


def default_room_name(room_id: str) -> str:
    return f"Room {room_id}"


def truncate_name(name: str | None) -> str | None:
    if not name:
        return None
    return name[:MAX_NAME_LENGTH]


class RoomRegistry:
    """
    In-memory registry of rooms keyed by room identifier.

    The global room is created on construction and seeded with one bot entry
    per profile. It is never evicted.
    """

    def __init__(self, bot_profiles: Iterable[BotProfile] = ()) -> None:
        self._rooms: dict[str, Room] = {}
        self.global_room = Room(
            room_id=GLOBAL_ROOM_ID, name=GLOBAL_ROOM_NAME, is_global=True
        )
        for profile in bot_profiles:
            self.global_room.participants[profile.id] = Participant(
                participant_id=profile.id,
                value=profile.target,
                name=profile.name,
                is_bot=True,
            )
        self._rooms[GLOBAL_ROOM_ID] = self.global_room

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def create_room(self, name: str | None = None) -> Room:
        """
        Create a room with a fresh code.

        Args:
            name: Display name; absent or blank names become "Room <code>"

        Returns:
            The newly stored Room
        """
        room_id = new_room_code()
        while room_id in self._rooms:
            room_id = new_room_code()
        return self._store_new_room(room_id, name)

    def resolve_room_for_join(self, room_id: str | None) -> JoinResolution:
        """
        Decide which room a joining connection lands in.

        Existing rooms are found as-is. An unknown but well-formed room code is
        created on the fly. Anything else falls back to the global room, so
        this never fails.
        """
        if not room_id:
            return JoinResolution(JoinOutcome.FOUND, self.global_room)

        room = self._rooms.get(room_id)
        if room is not None:
            return JoinResolution(JoinOutcome.FOUND, room)

        if is_room_code(room_id):
            return JoinResolution(JoinOutcome.CREATED, self._store_new_room(room_id))

        logger.info("Unknown room %r requested, falling back to global room", room_id)
        return JoinResolution(JoinOutcome.FALLBACK, self.global_room)

    def get_or_create_room_for_join(self, room_id: str | None) -> Room:
        return self.resolve_room_for_join(room_id).room

    def add_participant(
        self,
        room: Room,
        connection: Connection | None = None,
        name: str | None = None,
    ) -> Participant:
        """Insert a live participant with the neutral starting value."""
        participant_id = new_participant_id()
        while participant_id in room.participants:
            participant_id = new_participant_id()

        participant = Participant(
            participant_id=participant_id,
            name=truncate_name(name),
            connection=connection,
        )
        room.participants[participant_id] = participant
        return participant

    def remove_participant(self, room: Room, participant_id: str) -> Participant | None:
        return room.participants.pop(participant_id, None)

    def evict_idle_rooms(
        self, idle_threshold: float, now: float | None = None
    ) -> list[str]:
        """
        Remove non-global rooms with no live participants older than the threshold.

        Args:
            idle_threshold: Minimum room age in seconds before eviction
            now: Current unix time, defaults to time.time()

        Returns:
            Identifiers of the evicted rooms
        """
        now = time.time() if now is None else now
        evicted = [
            room.room_id
            for room in self._rooms.values()
            if not room.is_global
            and not room.live_participants()
            and now - room.created_at > idle_threshold
        ]
        for room_id in evicted:
            del self._rooms[room_id]
        return evicted

    def close_all_connections(self) -> int:
        """Ask every live connection to close. Returns how many were asked."""
        closed = 0
        for room in self._rooms.values():
            for participant in room.live_participants():
                connection = participant.connection
                if connection is not None and connection.is_open:
                    connection.request_close()
                    closed += 1
        return closed

    def _store_new_room(self, room_id: str, name: str | None = None) -> Room:
        room_name = name if name and name.strip() else default_room_name(room_id)
        room = Room(room_id=room_id, name=room_name)
        self._rooms[room_id] = room
        logger.info("Created room %s (%s)", room_id, room_name)
        return room
