"""Fan-out of full state snapshots to connected display clients."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class DisplayConnection(Protocol):
    async def send_text(self, data: str) -> None: ...


class BroadcastHub:
    """Sends the same serialized snapshot to every open connection.

    No diffing and no per-client state: a connection that fails a send is
    dropped and catches up with a fresh snapshot when it reconnects.
    """

    def __init__(self, snapshot: Callable[[], dict[str, Any]]) -> None:
        self._snapshot = snapshot
        self._connections: set[DisplayConnection] = set()

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return connection in self._connections

    def add(self, connection: DisplayConnection) -> None:
        self._connections.add(connection)
        logger.info(f"Display client connected ({len(self._connections)} open)")

    def discard(self, connection: DisplayConnection) -> None:
        if connection in self._connections:
            self._connections.discard(connection)
            logger.info(f"Display client disconnected ({len(self._connections)} open)")

    def payload(self) -> str:
        return json.dumps(self._snapshot(), ensure_ascii=False)

    async def send_snapshot(self, connection: DisplayConnection) -> bool:
        return await self._send(connection, self.payload())

    async def broadcast(self) -> int:
        """Send one snapshot to all connections. Returns the number delivered."""
        if not self._connections:
            return 0
        payload = self.payload()
        delivered = 0
        for connection in list(self._connections):
            if await self._send(connection, payload):
                delivered += 1
        return delivered

    async def _send(self, connection: DisplayConnection, payload: str) -> bool:
        try:
            await connection.send_text(payload)
            return True
        except Exception as e:
            logger.warning(f"Dropping display client after failed send: {type(e).__name__}: {e}")
            self.discard(connection)
            return False
