"""
Identifier generation for rooms and participants.
"""

import re
import secrets

ROOM_CODE_LENGTH = 6

_ROOM_CODE_PATTERN = re.compile(r"^[A-Z0-9]{6}$")


def new_room_code() -> str:
    """Return a 6-character uppercase hex room code."""
    return secrets.token_hex(ROOM_CODE_LENGTH // 2).upper()


def new_participant_id() -> str:
    """Return a 16-character lowercase hex participant identifier."""
    return secrets.token_hex(8)


def is_room_code(value: str | None) -> bool:
    """Check whether a value is shaped like a room code (6 of A-Z0-9)."""
    return bool(value) and _ROOM_CODE_PATTERN.fullmatch(value) is not None
