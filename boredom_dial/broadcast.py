"""
Fan-out of room stats to live connections.
"""

import logging

from .models import StatsMessage
from .stats import compute_stats
from .store import RoomRegistry

logger = logging.getLogger(__name__)


class Broadcaster:
    """Pushes a room's current stats to every open connection in that room."""

    def __init__(self, registry: RoomRegistry) -> None:
        self.registry = registry

    def broadcast(self, room_id: str) -> int:
        """
        Send the room's stats to all of its live connections.

        Delivery only enqueues on each connection, so this never suspends. A
        failure for one connection is logged and skipped.

        Args:
            room_id: The room to broadcast; unknown rooms are ignored

        Returns:
            Number of connections the payload was handed to
        """
        room = self.registry.get_room(room_id)
        if room is None:
            return 0

        stats = compute_stats(room)
        payload = StatsMessage(**stats.model_dump()).model_dump_json(by_alias=True)

        delivered = 0
        for participant in list(room.participants.values()):
            connection = participant.connection
            if connection is None or not connection.is_open:
                continue
            try:
                connection.deliver(payload)
            except Exception:
                logger.warning(
                    "Failed to deliver stats to %s in room %s",
                    participant.participant_id,
                    room_id,
                    exc_info=True,
                )
                continue
            delivered += 1
        return delivered
