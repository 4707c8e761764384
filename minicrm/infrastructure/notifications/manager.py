"""Connection management helpers for notification websockets.

Each user's set of websocket connections is that user's private channel:
nothing published for one user is ever written to another user's sockets.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class RealtimeDeliveryError(RuntimeError):
    """Raised when every open connection of a user rejected a message."""

    def __init__(self, user_id: int, failures: int) -> None:
        super().__init__(
            f"Realtime delivery to user {user_id} failed on {failures} connection(s)"
        )
        self.user_id = user_id
        self.failures = failures


class NotificationConnectionManager:
    """Manage active websocket connections grouped by user."""

    def __init__(self) -> None:
        self._connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self._connections[user_id].add(websocket)

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    def connection_count(self, user_id: int) -> int:
        return len(self._connections.get(user_id, ()))

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to every active connection for ``user_id``.

        Broken connections are dropped from the pool. Returns how many
        connections received the message; a user without connections is not
        an error. Raises :class:`RealtimeDeliveryError` when connections
        existed but none of them accepted the message.
        """

        connections = list(self._connections.get(user_id, set()))
        delivered = 0
        failures = 0
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:  # noqa: BLE001 - a broken socket must not stop the others
                logger.debug("Dropping broken websocket for user %s", user_id, exc_info=True)
                failures += 1
                self.disconnect(user_id, connection)
            else:
                delivered += 1
        if connections and not delivered:
            raise RealtimeDeliveryError(user_id, failures)
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "RealtimeDeliveryError", "notification_manager"]
