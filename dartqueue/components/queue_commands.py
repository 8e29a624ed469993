"""Queue and stats chat commands.

Public:
    !jonoon     Join the queue
    !peru       Leave the queue
    !jono       Show the queue
    !stats      Show own W/L, legs and average

Moderator+:
    !seuraava   Advance: the queue head becomes the current player

Any operator-defined custom command is answered with its response text.
Command words are configurable; matching is on the whole trimmed,
lower-cased message.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dartqueue.core.config import COMMAND_PREFIX
from dartqueue.core.events import ChatLine
from dartqueue.core.state import StateModel
from dartqueue.shared.models.stats import normalize_number
from dartqueue.shared.repositories import Repositories

if TYPE_CHECKING:
    from dartqueue.api.hub import BroadcastHub
    from dartqueue.core.config import BotSettings
    from dartqueue.core.session import ChatSession

LOGGER = logging.getLogger("QueueCommands")


@dataclass(frozen=True)
class CommandWords:
    join: str = "!jonoon"
    leave: str = "!peru"
    queue: str = "!jono"
    advance: str = "!seuraava"
    stats: str = "!stats"

    @classmethod
    def from_settings(cls, settings: BotSettings) -> CommandWords:
        return cls(
            join=settings.join_command,
            leave=settings.leave_command,
            queue=settings.list_command,
            advance=settings.advance_command,
            stats=settings.stats_command,
        )


class QueueCommands:
    def __init__(
        self,
        *,
        state: StateModel,
        repos: Repositories,
        hub: BroadcastHub,
        chat: ChatSession,
        words: CommandWords | None = None,
    ) -> None:
        self.state = state
        self.repos = repos
        self.hub = hub
        self.chat = chat
        self.words = words or CommandWords()
        self._handlers: dict[str, Callable[[ChatLine], Awaitable[None]]] = {
            self.words.join: self.join,
            self.words.leave: self.leave,
            self.words.queue: self.show_list,
            self.words.advance: self.advance,
            self.words.stats: self.show_stats,
        }

    async def handle(self, line: ChatLine) -> None:
        if line.is_self or not line.text.startswith(COMMAND_PREFIX):
            return

        command = line.text.strip().lower()
        handler = self._handlers.get(command)

        # Non-moderators do not see the advance command at all
        if command == self.words.advance and not line.elevated:
            handler = None

        if handler is not None:
            await handler(line)
            return

        custom = self.state.find_command_by_name(command)
        if custom is not None:
            LOGGER.info(f"Custom command {custom.name} used by {line.sender}")
            await self.chat.send(custom.response)

    async def join(self, line: ChatLine) -> None:
        user = line.sender

        if self.state.is_current(user):
            await self.chat.send(f"@{user} olet jo pelivuorossa.")
            return

        position = self.state.position_of(user)
        if position is not None:
            await self.chat.send(f"@{user} olet jo jonossa sijalla {position}.")
            return

        position = self.state.enqueue(user)
        self._save_queue()
        LOGGER.info(f"{user} joined the queue at position {position}")
        await self.chat.send(f"@{user} liittyminen onnistui ✅ Olet jonossa sijalla {position}.")
        await self.hub.broadcast()

    async def leave(self, line: ChatLine) -> None:
        user = line.sender

        if self.state.is_current(user):
            await self.chat.send(
                f"@{user} olet jo pelivuorossa, et voi perua enää tästä kierroksesta."
            )
            return

        if not self.state.withdraw(user):
            await self.chat.send(f"@{user} et ole tällä hetkellä jonossa.")
            return

        self._save_queue()
        LOGGER.info(f"{user} left the queue")
        await self.chat.send(f"@{user} osallistuminen peruttu. ❌")
        await self.hub.broadcast()

    async def show_list(self, line: ChatLine) -> None:
        if not self.state.queue:
            await self.chat.send("📋 Jono on tällä hetkellä tyhjä.")
            return

        entries = " | ".join(f"{i}. {name}" for i, name in enumerate(self.state.queue, start=1))
        await self.chat.send(f"📋 Jono: {entries}")

    async def advance(self, line: ChatLine) -> None:
        current = self.state.advance()
        self._save_queue()
        LOGGER.info(f"{line.sender} advanced the queue, current: {current}")
        await self.hub.broadcast()

    async def show_stats(self, line: ChatLine) -> None:
        user = line.sender
        record = self.state.stats.get(user)
        if record is None or record.average is None:
            return

        await self.chat.send(
            f"📊 {user} | W/L {record.wins}-{record.losses} | "
            f"Legs {normalize_number(record.legs_for)}-{normalize_number(record.legs_against)} | "
            f"Avg {record.average:.2f}"
        )

    def _save_queue(self) -> None:
        self.repos.queue.save(self.state.queue, self.state.current)
