"""Registry of live client connections keyed by user identifier."""

import logging
from typing import Any

from starlette.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)

REPLACED_CLOSE_CODE = 1000


def is_open(connection: WebSocket) -> bool:
    """True when both sides of the connection are still connected."""
    return (
        connection.client_state == WebSocketState.CONNECTED
        and connection.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """Maps a caller-supplied user identifier to one live connection.

    Registration is last-register-wins: a newer connection for the same
    identifier replaces the older one, which is then closed. Delivery is
    at-most-once and never queued.
    """

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._connections

    def get(self, user_id: str) -> WebSocket | None:
        return self._connections.get(user_id)

    async def register(self, user_id: str, connection: WebSocket) -> None:
        """Register ``connection`` for ``user_id``, closing any superseded one."""
        previous = self._connections.get(user_id)
        self._connections[user_id] = connection
        logger.info(f"Registered live connection for {user_id}")

        if previous is None or previous is connection:
            return

        logger.info(f"Replacing previous connection for {user_id}")
        if not is_open(previous):
            return
        try:
            await previous.close(
                code=REPLACED_CLOSE_CODE, reason="Replaced by a newer connection"
            )
        except RuntimeError as e:
            # Raced with the client closing it first
            logger.debug(f"Superseded connection for {user_id} already closed: {e}")

    def unregister(self, user_id: str, connection: WebSocket) -> bool:
        """Remove the mapping if it still points at ``connection``.

        A superseded connection closing later must not drop the newer
        registration for the same identifier.

        Returns:
            True if the mapping was removed
        """
        if self._connections.get(user_id) is not connection:
            return False
        del self._connections[user_id]
        logger.info(f"Unregistered live connection for {user_id}")
        return True

    async def send(self, user_id: str, message: dict[str, Any]) -> bool:
        """Push a JSON message to the connection registered for ``user_id``.

        Fire-and-forget: a missing or closed connection drops the message,
        and a failing send unregisters the connection. Never raises.

        Returns:
            True if the message was handed to an open connection
        """
        connection = self._connections.get(user_id)
        if connection is None:
            logger.debug(f"No live connection for {user_id}, dropping message")
            return False
        if not is_open(connection):
            logger.debug(f"Connection for {user_id} is not open, dropping message")
            return False

        try:
            await connection.send_json(message)
        except Exception as e:
            logger.warning(f"Failed to deliver to {user_id}, unregistering: {e}")
            self.unregister(user_id, connection)
            return False

        logger.debug(f"Delivered {message.get('type', 'message')} to {user_id}")
        return True
