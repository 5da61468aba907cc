"""
Shared data models for the Boredom Dial service.

This module defines the pydantic models used across multiple layers of the
application: bot configuration, the aggregate stats shape, the WebSocket wire
messages in both directions, and the administrative HTTP schemas.
"""

import math
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

MAX_NAME_LENGTH = 20


class BotProfile(BaseModel):
    """Configuration of one simulated participant in the global room."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Participant identifier of the bot")
    name: str = Field(..., description="Display name of the bot")
    target: float = Field(..., ge=0, le=100, description="Value the bot drifts toward")
    volatility: float = Field(..., ge=0, description="Size of the random per-tick nudge")
    interval: float = Field(..., gt=0, description="Seconds between ticks")


# MARK: - Stats


class Individual(BaseModel):
    """One participant's entry in a room's stats breakdown."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    boredom: int
    is_bot: bool = Field(False, alias="isBot")
    name: str | None = None


class RoomStats(BaseModel):
    """Aggregate value and per-participant breakdown of a room."""

    model_config = ConfigDict(populate_by_name=True)

    average: int = Field(..., description="Rounded mean of all values, 50 if empty")
    count: int = Field(..., description="Number of participants, bots included")
    individuals: list[Individual]
    room_name: str = Field(..., alias="roomName")
    room_id: str = Field(..., alias="roomId")


# MARK: - Server -> client messages


class StatsMessage(RoomStats):
    """Broadcast to every live connection whenever a room changes."""

    type: Literal["stats"] = "stats"


class WelcomeMessage(RoomStats):
    """Sent once to a connection right after it joins."""

    type: Literal["welcome"] = "welcome"
    user_id: str = Field(..., alias="userId")
    boredom: int = Field(..., description="The joining participant's own value")


# MARK: - Client -> server messages


class UpdateMessage(BaseModel):
    """Sets the sender's value."""

    type: Literal["update"]
    boredom: float

    @field_validator("boredom", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> float:
        # bool is an int subclass, but "true" is not a number on the wire
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("boredom must be a number")
        try:
            value = float(value)
        except OverflowError:
            value = math.inf if value > 0 else -math.inf
        if math.isnan(value):
            raise ValueError("boredom must be a number")
        return value


class SetNameMessage(BaseModel):
    """Sets the sender's display name."""

    type: Literal["setName"]
    name: str = Field(..., min_length=1, strict=True)


InboundMessage = Annotated[
    UpdateMessage | SetNameMessage, Field(discriminator="type")
]

inbound_message_adapter: TypeAdapter[UpdateMessage | SetNameMessage] = TypeAdapter(
    InboundMessage
)


# MARK: - Administrative HTTP schemas


class CreateRoomRequest(BaseModel):
    """Optional payload for room creation requests."""

    name: str | None = Field(None, description="Display name of the new room")


class CreateRoomResponse(BaseModel):
    """Response model for room creation."""

    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(..., alias="roomId")
    room_name: str = Field(..., alias="roomName")


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    rooms: int
    global_users: int = Field(..., alias="globalUsers")


class ErrorResponse(BaseModel):
    """Error body of the administrative endpoints."""

    error: str
