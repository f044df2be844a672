"""Starlette WebSocket transport for Broadcaster subscribers."""

from __future__ import annotations

from uuid import uuid4

from starlette.websockets import WebSocket

from podwatch.broadcast.broadcaster import Subscriber


class WebSocketSubscriber(Subscriber):
    """Wraps one accepted WebSocket; events go out as ``{"event", "data"}`` JSON."""

    def __init__(self, websocket: WebSocket, subscriber_id: str | None = None) -> None:
        self._websocket = websocket
        self._id = subscriber_id or uuid4().hex[:12]

    @property
    def subscriber_id(self) -> str:
        return self._id

    async def send(self, event: str, data: dict[str, object]) -> None:
        await self._websocket.send_json({"event": event, "data": data})
