"""Repository for the scheduled announcement list (loop-messages.json)."""

from __future__ import annotations

import logging

from dartqueue.shared.models.announcement import Announcement
from dartqueue.shared.models.stats import normalize_number
from dartqueue.shared.store import JsonDocumentStore

logger = logging.getLogger(__name__)

FILENAME = "loop-messages.json"


class AnnouncementRepository:
    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store

    def load(self, now_ms: int) -> list[Announcement]:
        """Load announcements; entries without ``lastSentAt`` are stamped with *now_ms*."""
        data = self.store.load(FILENAME)
        if not isinstance(data, list):
            return []

        items: list[Announcement] = []
        for raw in data:
            if not isinstance(raw, dict) or not raw.get("id") or not raw.get("message"):
                logger.warning(f"Skipping malformed announcement: {raw!r}")
                continue
            interval = raw.get("intervalMinutes")
            if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval <= 0:
                logger.warning(f"Skipping announcement {raw['id']!r} with bad interval {interval!r}")
                continue
            last_sent_at = raw.get("lastSentAt")
            if not isinstance(last_sent_at, (int, float)) or isinstance(last_sent_at, bool):
                last_sent_at = now_ms
            items.append(
                Announcement(
                    id=str(raw["id"]),
                    message=str(raw["message"]),
                    interval_minutes=normalize_number(interval),
                    enabled=bool(raw.get("enabled", True)),
                    last_sent_at=int(last_sent_at),
                )
            )
        return items

    def save(self, announcements: list[Announcement]) -> None:
        self.store.save(
            FILENAME,
            [
                {
                    "id": item.id,
                    "message": item.message,
                    "intervalMinutes": normalize_number(item.interval_minutes),
                    "enabled": item.enabled,
                    "lastSentAt": item.last_sent_at,
                }
                for item in announcements
            ],
        )
