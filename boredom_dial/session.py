"""
Per-connection session handling.

A session moves through CONNECTING -> JOINED -> CLOSED. Each transition has a
single entry point (join, handle_message, close) and all of them are
synchronous, so a participant table is never read, suspended on, and written
back later. Outbound payloads go through a bounded queue that a separate
coroutine drains to the socket, which keeps broadcasts from waiting on slow
clients.
"""

import asyncio
import enum
import logging

from fastapi import WebSocket
from pydantic import ValidationError

from .broadcast import Broadcaster
from .models import (
    SetNameMessage,
    UpdateMessage,
    WelcomeMessage,
    inbound_message_adapter,
)
from .stats import clamp, compute_stats, round_half_up
from .store import Participant, Room, RoomRegistry, truncate_name

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 32
GOING_AWAY = 1001

# Marker telling the pump to close the socket.
_CLOSE = object()


class SessionState(enum.Enum):
    CONNECTING = "connecting"
    JOINED = "joined"
    CLOSED = "closed"


class Session:
    """One real-time connection's membership in a room."""

    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster: Broadcaster,
        requested_room: str | None = None,
        name: str | None = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self.registry = registry
        self.broadcaster = broadcaster
        self.requested_room = requested_room
        self.requested_name = name
        self.state = SessionState.CONNECTING
        self.room: Room | None = None
        self.participant: Participant | None = None
        self.outbox: asyncio.Queue[object] = asyncio.Queue(maxsize=queue_size)

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.JOINED

    @property
    def participant_id(self) -> str | None:
        return self.participant.participant_id if self.participant else None

    # MARK: - Transitions

    def join(self) -> WelcomeMessage:
        """
        Place this connection in a room and announce it.

        The welcome message is queued for this connection only, then the room
        is broadcast so existing participants see the new count.

        Returns:
            The welcome message that was queued
        """
        if self.state is not SessionState.CONNECTING:
            raise RuntimeError(f"Cannot join from state {self.state.value}")

        room = self.registry.get_or_create_room_for_join(self.requested_room)
        participant = self.registry.add_participant(
            room, connection=self, name=self.requested_name
        )
        self.room = room
        self.participant = participant
        self.state = SessionState.JOINED

        stats = compute_stats(room)
        welcome = WelcomeMessage(
            **stats.model_dump(),
            user_id=participant.participant_id,
            boredom=round_half_up(participant.value),
        )
        self.deliver(welcome.model_dump_json(by_alias=True))

        logger.info(
            "User %s joined room %s. Users in room: %d",
            participant.participant_id,
            room.room_id,
            len(room.participants),
        )
        self.broadcaster.broadcast(room.room_id)
        return welcome

    def handle_message(self, raw: str | bytes) -> bool:
        """
        Apply one inbound payload.

        Unparseable payloads, unknown types and wrong value types are dropped
        without a reply.

        Returns:
            True if the message changed this participant and was broadcast
        """
        if self.state is not SessionState.JOINED:
            return False

        try:
            message = inbound_message_adapter.validate_json(raw)
        except ValidationError as e:
            logger.debug(
                "Ignoring invalid message from %s: %s",
                self.participant_id,
                e.errors(include_url=False),
            )
            return False

        participant = self.participant
        if participant is None or self.room is None:
            return False

        if isinstance(message, UpdateMessage):
            participant.value = round_half_up(clamp(message.boredom))
        elif isinstance(message, SetNameMessage):
            participant.name = truncate_name(message.name)
        else:
            return False

        self.broadcaster.broadcast(self.room.room_id)
        return True

    def close(self) -> None:
        """Leave the room. Safe to call more than once."""
        if self.state is SessionState.CLOSED:
            return

        previous = self.state
        self.state = SessionState.CLOSED
        if previous is not SessionState.JOINED or self.room is None:
            return

        room = self.room
        self.registry.remove_participant(room, self.participant_id)
        logger.info(
            "User %s left room %s. Users in room: %d",
            self.participant_id,
            room.room_id,
            len(room.participants),
        )
        self.broadcaster.broadcast(room.room_id)

    # MARK: - Outbound

    def deliver(self, payload: str) -> None:
        """Queue a payload without waiting; the oldest one goes if the queue is full."""
        if self.outbox.full():
            self.outbox.get_nowait()
            logger.warning("Send queue full for %s, dropped oldest payload", self.participant_id)
        self.outbox.put_nowait(payload)

    def request_close(self) -> None:
        if self.outbox.full():
            self.outbox.get_nowait()
        self.outbox.put_nowait(_CLOSE)

    async def pump(self, websocket: WebSocket) -> None:
        """Drain queued payloads to the socket until closed or a send fails."""
        while True:
            item = await self.outbox.get()
            try:
                if item is _CLOSE:
                    await websocket.close(code=GOING_AWAY)
                    return
                await websocket.send_text(item)
            except Exception:
                logger.warning("Send to %s failed", self.participant_id, exc_info=True)
                return
