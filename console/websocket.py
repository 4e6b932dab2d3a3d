"""
Drowsy - Live Updates
=======================
Pushes console log lines and server state changes to every open home page.

Two frame kinds are sent, both server -> browser:

    {"type": "log",    "data": {"text": "[12:00:01] ...", "level": "warn"}, "timestamp": ...}
    {"type": "status", "data": {"status": "Running", "message": "Server is ready"}, "timestamp": ...}

The last status frame is remembered and replayed to tabs that connect
later, so a freshly opened page shows the state without waiting for the
next change.
"""

import json
from datetime import datetime, timezone
from typing import Literal

from fastapi import WebSocket

FrameType = Literal["log", "status"]


class WebSocketManager:
    """
    Connected home pages and the frames pushed to them.

    Attributes:
        active_connections: Currently connected browser sockets.
        last_status:        Data of the most recent status frame, or None.
    """

    def __init__(self):
        self.active_connections: set[WebSocket] = set()
        self.last_status: dict[str, str] | None = None

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a browser socket and replay the last known status to it."""
        await websocket.accept()
        self.active_connections.add(websocket)
        if self.last_status is not None:
            payload = _frame("status", self.last_status)
            if not await _deliver(websocket, payload):
                self.active_connections.discard(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self.active_connections.discard(websocket)

    async def send_log(self, text: str, level: str = "info") -> None:
        """Push one console log line."""
        await self._push("log", {"text": text, "level": level})

    async def send_status(self, status: str, message: str = "") -> None:
        """Push a server state change and remember it for late joiners."""
        data = {"status": status, "message": message}
        self.last_status = data
        await self._push("status", data)

    async def _push(self, frame_type: FrameType, data: dict[str, str]) -> None:
        payload = _frame(frame_type, data)
        dead = [ws for ws in list(self.active_connections) if not await _deliver(ws, payload)]
        self.active_connections.difference_update(dead)


def _frame(frame_type: FrameType, data: dict[str, str]) -> str:
    return json.dumps(
        {
            "type": frame_type,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        ensure_ascii=False,
    )


async def _deliver(websocket: WebSocket, payload: str) -> bool:
    """Send one frame; False means the browser has gone away."""
    try:
        await websocket.send_text(payload)
    except Exception:
        return False
    return True
