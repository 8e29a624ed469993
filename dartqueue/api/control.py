"""Operator requests from display/admin clients."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from dartqueue.api.schemas import (
    AnnouncementPayload,
    AnnouncementTogglePayload,
    AnnouncementUpdatePayload,
    CommandPayload,
    CommandUpdatePayload,
    OperatorFrame,
    ResultPayload,
    SettingsPayload,
    payload_key,
)
from dartqueue.core.state import StateModel, now_ms
from dartqueue.shared.repositories import Repositories

if TYPE_CHECKING:
    from dartqueue.api.hub import BroadcastHub
    from dartqueue.core.session import ChatSession

logger = logging.getLogger(__name__)

# Older display pages send these tags
ACTION_ALIASES = {
    "next": "advance",
    "result": "record_result",
    "loop_add": "announcement_add",
    "loop_update": "announcement_update",
    "loop_toggle": "announcement_toggle",
    "loop_delete": "announcement_delete",
}


class ControlChannelHandler:
    """Applies one operator action per request and always broadcasts afterwards.

    Invalid payloads are ignored without feedback; the broadcast then simply
    reflects unchanged state. The channel itself is trusted, so there is no
    privilege check here.
    """

    def __init__(
        self,
        *,
        state: StateModel,
        repos: Repositories,
        hub: BroadcastHub,
        session: ChatSession,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.state = state
        self.repos = repos
        self.hub = hub
        self.session = session
        self._clock = clock
        self._handlers: dict[str, Callable[[Any], Awaitable[None]]] = {
            "advance": self.advance,
            "clear": self.clear,
            "remove": self.remove,
            "record_result": self.record_result,
            "announcement_add": self.announcement_add,
            "announcement_update": self.announcement_update,
            "announcement_toggle": self.announcement_toggle,
            "announcement_delete": self.announcement_delete,
            "command_add": self.command_add,
            "command_update": self.command_update,
            "command_delete": self.command_delete,
            "settings_save": self.settings_save,
        }

    async def handle_raw(self, raw: str | bytes) -> None:
        """Decode one client frame and handle it. Unparseable frames are dropped."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring unparseable operator frame: {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Ignoring operator frame that is not an object: {type(data).__name__}")
            return

        frame = OperatorFrame.model_validate(data)
        await self.handle(frame.action, frame.payload)

    async def handle(self, action: str, payload: Any = None) -> None:
        action = OperatorFrame(action=action).action
        action = ACTION_ALIASES.get(action, action)
        handler = self._handlers.get(action)

        if handler is None:
            logger.debug(f"Unknown operator action: {action!r}")
        else:
            try:
                await handler(payload)
            except ValidationError as e:
                logger.debug(f"Ignoring invalid {action} payload: {e.error_count()} error(s)")

        await self.hub.broadcast()

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    async def advance(self, payload: Any) -> None:
        current = self.state.advance()
        self._save_queue()
        logger.info(f"Operator advanced the queue, current: {current}")

    async def clear(self, payload: Any) -> None:
        self.state.clear()
        self._save_queue()
        logger.info("Operator cleared the queue")

    async def remove(self, payload: Any) -> None:
        name = payload_key(payload, "name")
        if not self.state.remove(name):
            logger.debug(f"Remove: {name!r} is not queued")
            return
        self._save_queue()
        logger.info(f"Operator removed {name} from the queue")

    async def record_result(self, payload: Any) -> None:
        result = ResultPayload.model_validate(payload)
        player = self.state.current
        record = self.state.record_result(result.legs_for, result.legs_against, result.average)
        if record is None:
            logger.debug("Result ignored: no current player")
            return
        self.repos.stats.save(self.state.stats)
        self._save_queue()
        logger.info(
            f"Result for {player}: {result.legs_for}-{result.legs_against}, avg {result.average}"
        )

    # ------------------------------------------------------------------
    # Announcements
    # ------------------------------------------------------------------

    async def announcement_add(self, payload: Any) -> None:
        data = AnnouncementPayload.model_validate(payload)
        announcement = self.state.add_announcement(
            data.message, data.interval_minutes, self._clock()
        )
        self._save_announcements()
        logger.info(f"Announcement {announcement.id} added (every {announcement.interval_minutes} min)")

    async def announcement_update(self, payload: Any) -> None:
        data = AnnouncementUpdatePayload.model_validate(payload)
        if self.state.update_announcement(data.id, data.message, data.interval_minutes) is None:
            logger.debug(f"Announcement update: unknown id {data.id}")
            return
        self._save_announcements()
        logger.info(f"Announcement {data.id} updated")

    async def announcement_toggle(self, payload: Any) -> None:
        data = AnnouncementTogglePayload.model_validate(payload)
        if self.state.toggle_announcement(data.id, data.enabled, self._clock()) is None:
            logger.debug(f"Announcement toggle: unknown id {data.id}")
            return
        self._save_announcements()
        logger.info(f"Announcement {data.id} {'enabled' if data.enabled else 'disabled'}")

    async def announcement_delete(self, payload: Any) -> None:
        announcement_id = payload_key(payload, "id")
        if not self.state.delete_announcement(announcement_id):
            logger.debug(f"Announcement delete: unknown id {announcement_id!r}")
            return
        self._save_announcements()
        logger.info(f"Announcement {announcement_id} deleted")

    # ------------------------------------------------------------------
    # Custom commands
    # ------------------------------------------------------------------

    async def command_add(self, payload: Any) -> None:
        data = CommandPayload.model_validate(payload)
        command = self.state.add_command(data.name, data.response, self._clock())
        if command is None:
            logger.debug(f"Command add: {data.name} already exists")
            return
        self.repos.commands.save(self.state.commands)
        logger.info(f"Custom command {command.name} added")

    async def command_update(self, payload: Any) -> None:
        data = CommandUpdatePayload.model_validate(payload)
        if self.state.update_command(data.id, data.name, data.response) is None:
            logger.debug(f"Command update rejected: id {data.id}, name {data.name}")
            return
        self.repos.commands.save(self.state.commands)
        logger.info(f"Custom command {data.name} updated")

    async def command_delete(self, payload: Any) -> None:
        command_id = payload_key(payload, "id")
        if not self.state.delete_command(command_id):
            logger.debug(f"Command delete: unknown id {command_id!r}")
            return
        self.repos.commands.save(self.state.commands)
        logger.info(f"Custom command {command_id} deleted")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def settings_save(self, payload: Any) -> None:
        data = SettingsPayload.model_validate(payload)
        previous = self.repos.config.load()
        self.repos.config.save(replace(previous, channel=data.channel, setup_completed=True))
        logger.info(f"Settings saved, channel: {data.channel}")

        if data.channel != previous.channel or not previous.setup_completed:
            self.session.disconnect()
            self.session.connect()

    def _save_queue(self) -> None:
        self.repos.queue.save(self.state.queue, self.state.current)

    def _save_announcements(self) -> None:
        self.repos.announcements.save(self.state.announcements)
