"""In-memory state: queue, current player, stats, announcements, custom commands.

A single ``StateModel`` instance is owned by the runtime and handed to every
component that reads or mutates it. Mutation methods only touch memory;
callers persist the affected document and broadcast afterwards.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field

from dartqueue.shared.models import Announcement, CustomCommand, PlayerStats
from dartqueue.shared.models.stats import normalize_number
from dartqueue.shared.repositories import Repositories

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Wall-clock epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id(timestamp_ms: int) -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{timestamp_ms}-{suffix}"


@dataclass
class StateModel:
    queue: list[str] = field(default_factory=list)
    current: str | None = None
    stats: dict[str, PlayerStats] = field(default_factory=dict)
    announcements: list[Announcement] = field(default_factory=list)
    commands: list[CustomCommand] = field(default_factory=list)

    @classmethod
    def load(cls, repos: Repositories, timestamp_ms: int) -> StateModel:
        queue_state = repos.queue.load()
        return cls(
            queue=queue_state.queue,
            current=queue_state.current,
            stats=repos.stats.load(),
            announcements=repos.announcements.load(timestamp_ms),
            commands=repos.commands.load(),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def next(self) -> str | None:
        return self.queue[0] if self.queue else None

    def position_of(self, name: str) -> int | None:
        """1-based queue position of *name*, compared case-insensitively."""
        wanted = name.lower()
        for index, entry in enumerate(self.queue):
            if entry.lower() == wanted:
                return index + 1
        return None

    def is_current(self, name: str) -> bool:
        return self.current is not None and self.current.lower() == name.lower()

    def find_announcement(self, announcement_id: str) -> Announcement | None:
        return next((a for a in self.announcements if a.id == announcement_id), None)

    def find_command(self, command_id: str) -> CustomCommand | None:
        return next((c for c in self.commands if c.id == command_id), None)

    def find_command_by_name(self, name: str) -> CustomCommand | None:
        wanted = name.strip().lower()
        return next((c for c in self.commands if c.name == wanted), None)

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def enqueue(self, name: str) -> int:
        """Append *name* and return its 1-based position. Caller checks duplicates."""
        self.queue.append(name)
        return len(self.queue)

    def withdraw(self, name: str) -> bool:
        position = self.position_of(name)
        if position is None:
            return False
        del self.queue[position - 1]
        return True

    def advance(self) -> str | None:
        """Pop the queue head into ``current``; an empty queue leaves no one on turn."""
        self.current = self.queue.pop(0) if self.queue else None
        return self.current

    def clear(self) -> None:
        self.queue = []
        self.current = None

    def remove(self, name: str) -> bool:
        """Remove the first entry equal to *name* (exact match)."""
        try:
            self.queue.remove(name)
        except ValueError:
            return False
        return True

    def record_result(
        self, legs_for: float, legs_against: float, average: float
    ) -> PlayerStats | None:
        """Add a finished match to the current player's stats and clear ``current``."""
        if self.current is None:
            return None
        record = self.stats.setdefault(self.current, PlayerStats())
        record.apply_result(
            normalize_number(legs_for), normalize_number(legs_against), normalize_number(average)
        )
        self.current = None
        return record

    # ------------------------------------------------------------------
    # Announcements
    # ------------------------------------------------------------------

    def add_announcement(
        self, message: str, interval_minutes: float, timestamp_ms: int
    ) -> Announcement:
        # First send waits a full interval
        announcement = Announcement(
            id=generate_id(timestamp_ms),
            message=message,
            interval_minutes=normalize_number(interval_minutes),
            enabled=True,
            last_sent_at=timestamp_ms,
        )
        self.announcements.append(announcement)
        return announcement

    def update_announcement(
        self, announcement_id: str, message: str, interval_minutes: float
    ) -> Announcement | None:
        target = self.find_announcement(announcement_id)
        if target is None:
            return None
        target.message = message
        target.interval_minutes = normalize_number(interval_minutes)
        return target

    def toggle_announcement(
        self, announcement_id: str, enabled: bool, timestamp_ms: int
    ) -> Announcement | None:
        """Set the enabled flag and re-arm the interval from *timestamp_ms*."""
        target = self.find_announcement(announcement_id)
        if target is None:
            return None
        target.enabled = enabled
        target.last_sent_at = timestamp_ms
        return target

    def delete_announcement(self, announcement_id: str) -> bool:
        before = len(self.announcements)
        self.announcements = [a for a in self.announcements if a.id != announcement_id]
        return len(self.announcements) != before

    # ------------------------------------------------------------------
    # Custom commands
    # ------------------------------------------------------------------

    def add_command(self, name: str, response: str, timestamp_ms: int) -> CustomCommand | None:
        """Add a command; None when the name is already taken."""
        if self.find_command_by_name(name) is not None:
            return None
        command = CustomCommand(id=generate_id(timestamp_ms), name=name, response=response)
        self.commands.append(command)
        return command

    def update_command(self, command_id: str, name: str, response: str) -> CustomCommand | None:
        """Rename/re-word a command; None when unknown or the name belongs to another one."""
        owner = self.find_command_by_name(name)
        if owner is not None and owner.id != command_id:
            return None
        target = self.find_command(command_id)
        if target is None:
            return None
        target.name = name
        target.response = response
        return target

    def delete_command(self, command_id: str) -> bool:
        before = len(self.commands)
        self.commands = [c for c in self.commands if c.id != command_id]
        return len(self.commands) != before
