"""Repository for the queue document (queue-data.json)."""

from __future__ import annotations

from dartqueue.shared.models.queue import QueueState
from dartqueue.shared.store import JsonDocumentStore

FILENAME = "queue-data.json"


class QueueRepository:
    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store

    def load(self) -> QueueState:
        data = self.store.load(FILENAME)
        if not isinstance(data, dict):
            return QueueState()
        queue = [name for name in data.get("queue") or [] if isinstance(name, str)]
        current = data.get("current")
        return QueueState(queue=queue, current=current if isinstance(current, str) else None)

    def save(self, queue: list[str], current: str | None) -> None:
        self.store.save(FILENAME, {"queue": list(queue), "current": current})
