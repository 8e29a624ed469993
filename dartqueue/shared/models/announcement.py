"""Data model for scheduled chat announcements."""

from __future__ import annotations

import math
from dataclasses import dataclass

MS_PER_MINUTE = 60 * 1000


@dataclass
class Announcement:
    """Message re-sent to chat every ``interval_minutes`` while enabled.

    ``last_sent_at`` is epoch milliseconds; the next send is due at
    ``last_sent_at + interval``.
    """

    id: str
    message: str
    interval_minutes: float
    enabled: bool = True
    last_sent_at: int = 0

    @property
    def interval_ms(self) -> float:
        return self.interval_minutes * MS_PER_MINUTE

    @property
    def next_due_at(self) -> float:
        return self.last_sent_at + self.interval_ms

    def is_due(self, now_ms: int) -> bool:
        return self.enabled and now_ms >= self.next_due_at

    def seconds_until_due(self, now_ms: int) -> int:
        remaining_ms = max(0.0, self.next_due_at - now_ms)
        return math.ceil(remaining_ms / 1000)
