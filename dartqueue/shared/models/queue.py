"""Data model for the queue document."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class QueueState:
    """Waiting list plus the player currently on turn."""

    queue: list[str] = field(default_factory=list)
    current: str | None = None
