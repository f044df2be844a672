"""REST routes. Handlers reach their collaborators through ``request.app.state``."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from podwatch.api.facade import QueryFacade
from podwatch.api.schemas import (
    BulkActionRequest,
    ErrorResponse,
    NamespaceConfigIn,
    NamespaceListRequest,
    PodActionRequest,
)
from podwatch.api.ws import websocket_session
from podwatch.models.actions import ActionResult, ActionType, BulkActionResult

_log = structlog.get_logger(component="api.routes")

router = APIRouter()
router.add_api_websocket_route("/ws", websocket_session)


def _facade(request: Request) -> QueryFacade:
    return request.app.state.facade  # type: ignore[no-any-return]


def _read(what: str, fn: Callable[[], dict[str, Any]]) -> dict[str, Any] | JSONResponse:
    """Run a read handler; any failure becomes a 500 carrying the message."""
    try:
        return fn()
    except Exception as exc:  # noqa: BLE001
        _log.error("read failed", what=what, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="READ_FAILED", detail=f"Failed to fetch {what}: {exc}").model_dump(),
        )


def _action_response(result: ActionResult) -> dict[str, Any] | JSONResponse:
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error="ACTION_FAILED", detail=result.message).model_dump(),
        )
    return {"success": True, "data": result.to_dict()}


def _bulk_response(result: BulkActionResult) -> dict[str, Any]:
    return result.to_dict()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/pods")
async def get_all_pods(request: Request) -> Any:
    facade = _facade(request)
    return _read(
        "pods",
        lambda: {
            "success": True,
            "data": [p.to_dict() for p in facade.all_pods()],
            "stats": facade.stats().to_dict(),
            "connected": facade.connected,
        },
    )


@router.get("/pods/{namespace}")
async def get_namespace_pods(namespace: str, request: Request) -> Any:
    facade = _facade(request)
    return _read(
        f"pods for namespace {namespace}",
        lambda: {
            "success": True,
            "data": [p.to_dict() for p in facade.pods_in(namespace)],
            "namespace": namespace,
        },
    )


@router.get("/stats")
async def get_stats(request: Request) -> Any:
    facade = _facade(request)
    return _read(
        "stats",
        lambda: {"success": True, "data": facade.stats().to_dict(), "connected": facade.connected},
    )


@router.get("/namespaces")
async def get_namespaces(request: Request) -> Any:
    facade = _facade(request)
    return _read("namespaces", lambda: {"success": True, "data": [ns.to_dict() for ns in facade.namespaces()]})


@router.get("/health")
async def get_health(request: Request) -> Any:
    return _facade(request).health()


@router.get("/metrics")
async def get_metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@router.post("/namespaces")
async def update_namespaces(configs: list[NamespaceConfigIn], request: Request) -> Any:
    updated = await _facade(request).update_namespaces(c.to_model() for c in configs)
    return {
        "success": True,
        "message": "Namespaces updated successfully",
        "data": [ns.to_dict() for ns in updated],
    }


@router.post("/action")
async def execute_action(body: PodActionRequest, request: Request) -> Any:
    return _action_response(await _facade(request).execute_action(body.to_model()))


# Bulk routes are registered before /action/{action}/{namespace} so that
# "bulk" is never captured as an action name.


@router.post("/action/bulk")
async def execute_bulk_action(body: BulkActionRequest, request: Request) -> Any:
    return _bulk_response(await _facade(request).execute_bulk(body.action, body.namespaces))


@router.post("/action/bulk/{action}")
async def execute_bulk_shorthand(action: ActionType, body: NamespaceListRequest, request: Request) -> Any:
    facade = _facade(request)
    handlers = {
        ActionType.START: facade.start_namespaces,
        ActionType.STOP: facade.stop_namespaces,
        ActionType.RESTART: facade.restart_namespaces,
    }
    return _bulk_response(await handlers[action](body.namespaces))


@router.post("/action/{action}/{namespace}")
async def execute_namespace_shorthand(action: ActionType, namespace: str, request: Request) -> Any:
    facade = _facade(request)
    handlers = {
        ActionType.START: facade.start_namespace,
        ActionType.STOP: facade.stop_namespace,
        ActionType.RESTART: facade.restart_namespace,
    }
    return _action_response(await handlers[action](namespace))
