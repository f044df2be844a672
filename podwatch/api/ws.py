"""WebSocket session: subscribe on connect, answer client commands.

Client messages are ``{"event": <name>, "data": {...}}``:

    subscribe-pods       -> subscription-confirmed
    get-pods             -> pods-data
    execute-action       -> action-completed | action-error
    execute-bulk-action  -> bulk-action-completed | bulk-action-error

Action results are also relayed to every subscriber by the facade.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from podwatch.api.facade import QueryFacade
from podwatch.api.schemas import BulkActionRequest, PodActionRequest
from podwatch.broadcast.broadcaster import Broadcaster
from podwatch.broadcast.websocket import WebSocketSubscriber
from podwatch.errors import RequestError

_log = structlog.get_logger(component="api.ws")

Message = dict[str, Any]


def _error(message: str) -> Message:
    return {"event": "error", "data": {"message": message}}


async def handle_message(facade: QueryFacade, message: Any) -> Message:
    """Turn one client message into the direct reply for that client."""
    if not isinstance(message, dict) or not isinstance(message.get("event"), str):
        return _error("Expected an object with an 'event' field")
    event: str = message["event"]
    data = message.get("data") or {}
    if not isinstance(data, dict):
        return _error("'data' must be an object")

    if event == "subscribe-pods":
        namespaces = data.get("namespaces")
        _log.info("client subscribed to pod updates", namespaces=namespaces or "all")
        return {"event": "subscription-confirmed", "data": {"namespaces": namespaces}}

    if event == "get-pods":
        return {"event": "pods-data", "data": facade.snapshot().to_dict()}

    if event == "execute-action":
        try:
            request = PodActionRequest.model_validate(data)
            result = await facade.execute_action(request.to_model())
        except (ValidationError, RequestError) as exc:
            _log.warning("action execution rejected", error=str(exc))
            return {
                "event": "action-error",
                "data": {
                    "success": False,
                    "message": str(exc),
                    "action": data.get("action"),
                    "namespace": data.get("namespace"),
                    "podName": data.get("podName"),
                },
            }
        return {"event": "action-completed", "data": result.to_dict()}

    if event == "execute-bulk-action":
        try:
            request_bulk = BulkActionRequest.model_validate(data)
            bulk = await facade.execute_bulk(request_bulk.action, request_bulk.namespaces)
        except (ValidationError, RequestError) as exc:
            _log.warning("bulk action execution rejected", error=str(exc))
            return {
                "event": "bulk-action-error",
                "data": {
                    "success": False,
                    "message": str(exc),
                    "action": data.get("action"),
                    "namespaces": data.get("namespaces"),
                },
            }
        return {"event": "bulk-action-completed", "data": bulk.to_dict()}

    return _error(f"Unknown event: {event}")


async def websocket_session(websocket: WebSocket) -> None:
    facade: QueryFacade = websocket.app.state.facade
    broadcaster: Broadcaster = websocket.app.state.broadcaster

    await websocket.accept()
    subscriber = WebSocketSubscriber(websocket)
    await broadcaster.subscribe(subscriber)
    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                await websocket.send_json(_error("Malformed JSON"))
                continue
            await websocket.send_json(await handle_message(facade, message))
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.unsubscribe(subscriber)
