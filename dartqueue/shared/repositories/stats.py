"""Repository for the stats document (stats-data.json)."""

from __future__ import annotations

import logging

from dartqueue.shared.models.stats import PlayerStats, normalize_number
from dartqueue.shared.store import JsonDocumentStore

logger = logging.getLogger(__name__)

FILENAME = "stats-data.json"

# document key -> PlayerStats attribute
_FIELDS = {
    "games": "games",
    "wins": "wins",
    "losses": "losses",
    "legsFor": "legs_for",
    "legsAgainst": "legs_against",
    "avgSum": "avg_sum",
}


class StatsRepository:
    def __init__(self, store: JsonDocumentStore) -> None:
        self.store = store

    def load(self) -> dict[str, PlayerStats]:
        data = self.store.load(FILENAME)
        if not isinstance(data, dict):
            return {}

        stats: dict[str, PlayerStats] = {}
        for name, record in data.items():
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed stats record for {name!r}")
                continue
            values = {}
            for key, attr in _FIELDS.items():
                raw = record.get(key, 0)
                ok = isinstance(raw, (int, float)) and not isinstance(raw, bool)
                values[attr] = normalize_number(raw) if ok else 0
            stats[str(name)] = PlayerStats(**values)
        return stats

    def save(self, stats: dict[str, PlayerStats]) -> None:
        document = {
            name: {key: normalize_number(getattr(record, attr)) for key, attr in _FIELDS.items()}
            for name, record in stats.items()
        }
        self.store.save(FILENAME, document)
