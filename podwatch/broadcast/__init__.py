"""Push fan-out layer.

Exports:
    Subscriber          -- Abstract subscriber handle.
    Broadcaster         -- Snapshot / action-result publisher.
    WebSocketSubscriber -- Subscriber backed by a Starlette WebSocket.
"""

from podwatch.broadcast.broadcaster import (
    ACTION_RESULT,
    BULK_ACTION_RESULT,
    NOTIFICATION,
    PODS_UPDATE,
    Broadcaster,
    Subscriber,
)
from podwatch.broadcast.websocket import WebSocketSubscriber

__all__ = [
    "ACTION_RESULT",
    "BULK_ACTION_RESULT",
    "NOTIFICATION",
    "PODS_UPDATE",
    "Broadcaster",
    "Subscriber",
    "WebSocketSubscriber",
]
