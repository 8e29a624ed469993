"""Sequential event loop: every state mutation happens here, one event at a time."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from dartqueue.core.events import (
    ChatConnected,
    ChatDisconnected,
    ChatLine,
    ClientConnected,
    Event,
    OperatorMessage,
    OperatorRequest,
    Tick,
)

if TYPE_CHECKING:
    from dartqueue.api.control import ControlChannelHandler
    from dartqueue.api.hub import BroadcastHub
    from dartqueue.components.announcements import AnnouncementDispatcher
    from dartqueue.components.queue_commands import QueueCommands
    from dartqueue.core.session import ChatSession

LOGGER = logging.getLogger("Engine")


class Engine:
    """Consumes events from a single queue and routes them to their handler.

    Producers (chat transport, WebSocket endpoint, poll loop) only call
    :meth:`submit`; they never touch state themselves.
    """

    def __init__(self) -> None:
        self.events: asyncio.Queue[Event] = asyncio.Queue()
        self.commands: QueueCommands | None = None
        self.control: ControlChannelHandler | None = None
        self.dispatcher: AnnouncementDispatcher | None = None
        self.session: ChatSession | None = None
        self.hub: BroadcastHub | None = None
        self._handlers: dict[type, Callable[[Any], Awaitable[None]]] = {
            ChatLine: self._on_chat_line,
            OperatorMessage: self._on_operator_message,
            OperatorRequest: self._on_operator_request,
            Tick: self._on_tick,
            ChatConnected: self._on_chat_connected,
            ChatDisconnected: self._on_chat_disconnected,
            ClientConnected: self._on_client_connected,
        }

    def bind(
        self,
        *,
        commands: QueueCommands,
        control: ControlChannelHandler,
        dispatcher: AnnouncementDispatcher,
        session: ChatSession,
        hub: BroadcastHub,
    ) -> None:
        self.commands = commands
        self.control = control
        self.dispatcher = dispatcher
        self.session = session
        self.hub = hub

    def submit(self, event: Event) -> None:
        self.events.put_nowait(event)

    async def run(self) -> None:
        LOGGER.info("Event engine started")
        while True:
            event = await self.events.get()
            try:
                await self.handle(event)
            finally:
                self.events.task_done()

    async def process_pending(self) -> int:
        """Handle every event queued so far, including ones those events submit."""
        processed = 0
        while not self.events.empty():
            event = self.events.get_nowait()
            try:
                await self.handle(event)
            finally:
                self.events.task_done()
            processed += 1
        return processed

    async def handle(self, event: Event) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            LOGGER.warning(f"No handler for event: {type(event).__name__}")
            return
        try:
            await handler(event)
        except Exception:
            LOGGER.exception(f"Error while handling {type(event).__name__}")

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def _on_chat_line(self, event: ChatLine) -> None:
        await self.commands.handle(event)

    async def _on_operator_message(self, event: OperatorMessage) -> None:
        await self.control.handle_raw(event.raw)

    async def _on_operator_request(self, event: OperatorRequest) -> None:
        await self.control.handle(event.action, event.payload)

    async def _on_tick(self, event: Tick) -> None:
        await self.dispatcher.run_due()

    async def _on_chat_connected(self, event: ChatConnected) -> None:
        await self.session.on_connected(event.source)

    async def _on_chat_disconnected(self, event: ChatDisconnected) -> None:
        await self.session.on_disconnected(event.source)

    async def _on_client_connected(self, event: ClientConnected) -> None:
        self.hub.add(event.connection)
        await self.hub.send_snapshot(event.connection)
