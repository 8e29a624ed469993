"""Repository layer: one repository per persisted JSON document."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dartqueue.shared.store import JsonDocumentStore

from .announcement import AnnouncementRepository
from .app_config import AppConfigRepository
from .custom_command import CustomCommandRepository
from .queue import QueueRepository
from .stats import StatsRepository


@dataclass
class Repositories:
    queue: QueueRepository
    stats: StatsRepository
    announcements: AnnouncementRepository
    commands: CustomCommandRepository
    config: AppConfigRepository

    @classmethod
    def for_directory(cls, directory: Path) -> Repositories:
        store = JsonDocumentStore(directory)
        return cls(
            queue=QueueRepository(store),
            stats=StatsRepository(store),
            announcements=AnnouncementRepository(store),
            commands=CustomCommandRepository(store),
            config=AppConfigRepository(store),
        )


__all__ = [
    "AnnouncementRepository",
    "AppConfigRepository",
    "CustomCommandRepository",
    "QueueRepository",
    "Repositories",
    "StatsRepository",
]
