"""
Tests for room code and participant identifier generation.
"""

import re

from boredom_dial.ids import is_room_code, new_participant_id, new_room_code


class TestIdentifiers:
    def test_room_code_shape(self):
        """Room codes are six uppercase hex characters."""
        for _ in range(50):
            code = new_room_code()
            assert re.fullmatch(r"[0-9A-F]{6}", code)
            assert is_room_code(code)

    def test_participant_id_shape(self):
        """Participant ids are sixteen lowercase hex characters."""
        participant_id = new_participant_id()
        assert re.fullmatch(r"[0-9a-f]{16}", participant_id)

    def test_participant_ids_do_not_repeat(self):
        ids = {new_participant_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_is_room_code(self):
        assert is_room_code("ABC123")
        assert is_room_code("ZZZZZZ")
        assert not is_room_code("abc123")
        assert not is_room_code("ABC12")
        assert not is_room_code("ABC1234")
        assert not is_room_code("ABC-12")
        assert not is_room_code("global")
        assert not is_room_code("")
        assert not is_room_code(None)
