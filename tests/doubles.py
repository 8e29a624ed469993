"""
Test doubles for the chat transport, display connections and the clock.
"""

from __future__ import annotations

import asyncio

from dartqueue.core.events import ChatConnected

START_MS = 1_700_000_000_000


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTransport:
    """Chat transport double: records sent lines, runs until closed."""

    def __init__(self, channel: str, submit) -> None:
        self.channel = channel
        self.submit = submit
        self.sent: list[str] = []
        self.closed = False
        self.fail_sends = False
        self._stopped = asyncio.Event()

    async def run(self) -> None:
        await self._stopped.wait()

    async def close(self) -> None:
        self.closed = True
        self._stopped.set()

    async def say(self, text: str) -> None:
        if self.fail_sends:
            raise ConnectionError("chat send failed")
        self.sent.append(text)


class FakeTransportFactory:
    def __init__(self) -> None:
        self.created: list[FakeTransport] = []

    def __call__(self, channel: str, submit) -> FakeTransport:
        transport = FakeTransport(channel, submit)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


class FakeConnection:
    """Display client double collecting every frame it is sent."""

    def __init__(self, fail: bool = False) -> None:
        self.frames: list[str] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("client went away")
        self.frames.append(data)


async def connect_chat(runtime, transports: FakeTransportFactory) -> FakeTransport:
    """Bring the chat session to connected through the engine."""
    runtime.session.connect()
    transport = transports.last
    runtime.engine.submit(ChatConnected(transport))
    await runtime.engine.process_pending()
    return transport
