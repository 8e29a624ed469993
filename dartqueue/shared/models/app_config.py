"""Data model for the persisted application configuration."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PORT = 3000


@dataclass
class AppConfig:
    channel: str = ""
    port: int = DEFAULT_PORT
    setup_completed: bool = False

    @property
    def is_ready(self) -> bool:
        """True when a chat connection may be attempted."""
        return self.setup_completed and bool(self.channel)
