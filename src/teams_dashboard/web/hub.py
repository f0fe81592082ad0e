"""Registry of live WebSocket observers and change fan-out."""

import json
import logging
import time

from starlette.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_open(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """The set of connected observers.

    Observers get a single handshake on connect and then every broadcast
    made while they are open. Nothing is buffered or replayed; a new
    observer fetches current state through the query API.
    """

    def __init__(self):
        self._connections: set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, websocket: WebSocket) -> bool:
        return websocket in self._connections

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        # Handshake goes out before registration so it precedes any broadcast.
        await websocket.send_text(json.dumps({"type": "connected", "timestamp": _now_ms()}))
        self._connections.add(websocket)
        logger.info("Observer connected. Total connections: %d", len(self._connections))

    def disconnect(self, websocket: WebSocket):
        if websocket in self._connections:
            self._connections.discard(websocket)
            logger.info("Observer disconnected. Total connections: %d", len(self._connections))

    async def broadcast(self, message: dict) -> int:
        """Send a message to every open observer; returns how many got it."""
        payload = json.dumps(message)
        sent = 0
        for websocket in list(self._connections):
            if not _is_open(websocket):
                continue
            try:
                await websocket.send_text(payload)
            except Exception as e:
                logger.warning("Dropping observer after send failure: %s", e)
                self.disconnect(websocket)
                continue
            sent += 1
        return sent
