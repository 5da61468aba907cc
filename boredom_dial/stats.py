"""
Aggregation of a room's participant values.
"""

import math

from .models import Individual, RoomStats
from .store import DEFAULT_VALUE, Room


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def compute_stats(room: Room) -> RoomStats:
    """
    Compute the aggregate for a room.

    The average is the rounded mean of every participant's value, bots
    included, or 50 when the room is empty. This has no side effects.
    """
    participants = list(room.participants.values())
    count = len(participants)
    if count:
        average = round_half_up(sum(p.value for p in participants) / count)
    else:
        average = DEFAULT_VALUE

    individuals = [
        Individual(
            id=p.participant_id,
            boredom=round_half_up(p.value),
            is_bot=p.is_bot,
            name=p.name,
        )
        for p in participants
    ]
    return RoomStats(
        average=average,
        count=count,
        individuals=individuals,
        room_name=room.name,
        room_id=room.room_id,
    )
