"""Repository for the configuration document (config.json)."""

from __future__ import annotations

import logging

from dartqueue.shared.models.app_config import DEFAULT_PORT, AppConfig
from dartqueue.shared.store import JsonDocumentStore

logger = logging.getLogger(__name__)

FILENAME = "config.json"


class AppConfigRepository:
    """Loads config.json once, writing defaults when it does not exist yet."""

    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        if self._config is not None:
            return self._config

        if not self.store.exists(FILENAME):
            self._config = AppConfig()
            self.save(self._config)
            logger.info(f"Created default configuration at {self.store.path_for(FILENAME)}")
            return self._config

        data = self.store.load(FILENAME)
        if not isinstance(data, dict):
            data = {}
        port = data.get("port", DEFAULT_PORT)
        self._config = AppConfig(
            channel=str(data.get("channel") or "").strip().lower(),
            port=port if isinstance(port, int) and not isinstance(port, bool) else DEFAULT_PORT,
            setup_completed=bool(data.get("setupCompleted", False)),
        )
        return self._config

    def save(self, config: AppConfig) -> None:
        self._config = config
        self.store.save(
            FILENAME,
            {
                "channel": config.channel,
                "port": config.port,
                "setupCompleted": config.setup_completed,
            },
        )
