"""Chat session lifecycle: disconnected -> connecting -> connected -> disconnected."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from dartqueue.core.events import ChatDisconnected, Submit
from dartqueue.shared.repositories import AppConfigRepository

if TYPE_CHECKING:
    from dartqueue.api.hub import BroadcastHub

LOGGER = logging.getLogger("ChatSession")


class ChatTransport(Protocol):
    async def run(self) -> None: ...

    async def close(self) -> None: ...

    async def say(self, text: str) -> None: ...


# (channel login, submit) -> transport
TransportFactory = Callable[[str, Submit], ChatTransport]


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ChatSession:
    """Owns the chat transport and exposes ``send`` to the other components.

    Transport callbacks never touch the session directly: the transport submits
    ``ChatConnected``/``ChatDisconnected`` events and the engine calls
    :meth:`on_connected`/:meth:`on_disconnected` from the sequential context.
    """

    def __init__(
        self,
        *,
        config_repo: AppConfigRepository,
        hub: BroadcastHub,
        transport_factory: TransportFactory,
        submit: Submit,
    ) -> None:
        self.config_repo = config_repo
        self.hub = hub
        self._transport_factory = transport_factory
        self._submit = submit
        self._transport: ChatTransport | None = None
        self._run_task: asyncio.Task | None = None
        self._close_tasks: set[asyncio.Task] = set()
        self.state = SessionState.DISCONNECTED
        self.channel: str | None = None

    @property
    def connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    @property
    def transport(self) -> ChatTransport | None:
        return self._transport

    def connect(self) -> bool:
        """Start a transport for the configured channel. Returns True if one was started."""
        if self._transport is not None:
            LOGGER.info("Chat session already running")
            return False

        config = self.config_repo.load()
        if not config.is_ready:
            LOGGER.warning("Setup not completed, chat session not started")
            return False

        transport = self._transport_factory(config.channel, self._submit)
        self._transport = transport
        self.channel = config.channel
        self.state = SessionState.CONNECTING
        self._run_task = asyncio.create_task(self._run(transport))
        LOGGER.info(f"Connecting chat session to channel: {config.channel}")
        return True

    def disconnect(self) -> bool:
        """Drop the current transport and close it in the background."""
        transport = self._transport
        if transport is None:
            return False

        self._transport = None
        self.channel = None
        self.state = SessionState.DISCONNECTED
        task = asyncio.create_task(self._close(transport))
        self._close_tasks.add(task)
        task.add_done_callback(self._close_tasks.discard)
        LOGGER.info("Chat session disconnected")
        return True

    async def shutdown(self) -> None:
        """Close the transport and wait for its run task (application shutdown)."""
        transport, task = self._transport, self._run_task
        self._transport = None
        self._run_task = None
        self.channel = None
        self.state = SessionState.DISCONNECTED
        if transport is not None:
            await self._close(transport)
        if self._close_tasks:
            await asyncio.gather(*self._close_tasks)
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def send(self, text: str) -> bool:
        if not self.connected or self._transport is None:
            LOGGER.debug(f"Not connected, dropping chat message: {text}")
            return False
        try:
            await self._transport.say(text)
            return True
        except Exception as e:
            LOGGER.error(f"Failed to send chat message: {type(e).__name__}: {e}")
            return False

    async def on_connected(self, source: object) -> None:
        if source is not self._transport:
            LOGGER.debug("Ignoring connected event from a stale transport")
            return
        self.state = SessionState.CONNECTED
        LOGGER.info(f"Chat session connected: #{self.channel}")
        await self.hub.broadcast()

    async def on_disconnected(self, source: object) -> None:
        if source is not self._transport:
            LOGGER.debug("Ignoring disconnected event from a stale transport")
            return
        self._transport = None
        self.channel = None
        self.state = SessionState.DISCONNECTED
        LOGGER.warning("Chat session lost its connection")
        await self.hub.broadcast()

    async def _run(self, transport: ChatTransport) -> None:
        try:
            await transport.run()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            LOGGER.error(f"Chat transport stopped with error: {type(e).__name__}: {e}")
        finally:
            self._submit(ChatDisconnected(transport))

    async def _close(self, transport: ChatTransport) -> None:
        try:
            await transport.close()
        except Exception as e:
            LOGGER.warning(f"Chat transport close failed: {type(e).__name__}: {e}")
