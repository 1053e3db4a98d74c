"""WebSocket connections keyed by player id."""

import logging

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from game.broadcaster import Broadcaster
from game.events import OutboundEvent

logger = logging.getLogger(__name__)


class ConnectionManager(Broadcaster):
    """Maps stable player ids to their live socket. One socket per player id."""

    def __init__(self):
        self._sockets: dict[str, WebSocket] = {}

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._sockets

    def connect(self, player_id: str, websocket: WebSocket) -> None:
        self._sockets[player_id] = websocket

    def disconnect(self, player_id: str, websocket: WebSocket) -> None:
        # only drop the mapping if it still points at this socket
        if self._sockets.get(player_id) is websocket:
            del self._sockets[player_id]

    async def send_to_player(self, player_id: str, event: OutboundEvent) -> None:
        websocket = self._sockets.get(player_id)
        if websocket is None or websocket.application_state != WebSocketState.CONNECTED:
            logger.debug("No open socket for %s; dropping %s", player_id, event.event_name)
            return
        try:
            await websocket.send_json(event.to_message())
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.warning("Send %s to %s failed: %s", event.event_name, player_id, e)
