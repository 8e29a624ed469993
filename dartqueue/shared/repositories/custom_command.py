"""Repository for operator-defined chat commands (custom-commands.json)."""

from __future__ import annotations

import logging

from dartqueue.shared.models.custom_command import CustomCommand
from dartqueue.shared.store import JsonDocumentStore

logger = logging.getLogger(__name__)

FILENAME = "custom-commands.json"


class CustomCommandRepository:
    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store

    def load(self) -> list[CustomCommand]:
        data = self.store.load(FILENAME)
        if not isinstance(data, list):
            return []

        commands: list[CustomCommand] = []
        for raw in data:
            if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
                logger.warning(f"Skipping malformed custom command: {raw!r}")
                continue
            commands.append(
                CustomCommand(
                    id=str(raw["id"]),
                    name=str(raw["name"]).strip().lower(),
                    response=str(raw.get("response") or ""),
                )
            )
        return commands

    def save(self, commands: list[CustomCommand]) -> None:
        self.store.save(
            FILENAME,
            [{"id": c.id, "name": c.name, "response": c.response} for c in commands],
        )
