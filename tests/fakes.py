"""
Test doubles shared across the Boredom Dial test suite.
"""

import json


class FakeConnection:
    """Records delivered payloads in place of a real session."""

    def __init__(self, is_open: bool = True, fail: bool = False) -> None:
        self.is_open = is_open
        self.fail = fail
        self.payloads: list[str] = []
        self.close_requested = False

    def deliver(self, payload: str) -> None:
        if self.fail:
            raise RuntimeError("socket is gone")
        self.payloads.append(payload)

    def request_close(self) -> None:
        self.close_requested = True

    @property
    def messages(self) -> list[dict]:
        return [json.loads(p) for p in self.payloads]


class FixedRandom:
    """Stand-in for random.Random that always returns the same draw."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class FakeWebSocket:
    """Records what a session pump sends."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[str] = []
        self.close_code: int | None = None

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_code = code


def drain(session) -> list:
    """Pop every queued payload off a session's outbox, parsing JSON strings."""
    items = []
    while not session.outbox.empty():
        item = session.outbox.get_nowait()
        items.append(json.loads(item) if isinstance(item, str) else item)
    return items
