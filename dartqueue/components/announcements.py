"""Scheduled announcements: periodically re-sent chat messages while the bot is connected."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from dartqueue.core.events import Submit, Tick
from dartqueue.core.state import StateModel, now_ms
from dartqueue.shared.repositories import Repositories

if TYPE_CHECKING:
    from dartqueue.api.hub import BroadcastHub
    from dartqueue.core.session import ChatSession

LOGGER = logging.getLogger("Announcements")


class AnnouncementDispatcher:
    """Fires due announcements on every tick.

    An announcement is due when it is enabled and a full interval has passed
    since ``last_sent_at``. Fired announcements are stamped even when the send
    fails; there is no retry.
    """

    def __init__(
        self,
        *,
        state: StateModel,
        repos: Repositories,
        hub: BroadcastHub,
        chat: ChatSession,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.state = state
        self.repos = repos
        self.hub = hub
        self.chat = chat
        self._clock = clock

    async def run_due(self) -> int:
        """Send every due announcement. Returns how many fired."""
        if not self.chat.connected:
            return 0

        fired = 0
        for announcement in list(self.state.announcements):
            now = self._clock()
            if not announcement.is_due(now):
                continue

            await self.chat.send(announcement.message)
            announcement.last_sent_at = now
            fired += 1
            LOGGER.info(f"Announcement {announcement.id} sent")

        if fired:
            self.repos.announcements.save(self.state.announcements)
            await self.hub.broadcast()
        return fired

    async def poll_loop(self, submit: Submit, interval: float) -> None:
        """Submit a ``Tick`` every *interval* seconds until cancelled."""
        LOGGER.info(f"Announcement poll loop started ({interval:g}s)")
        while True:
            await asyncio.sleep(interval)
            submit(Tick())
