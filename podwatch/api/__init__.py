"""REST and WebSocket API layer for podwatch.

Exposes:
    create_app  -- FastAPI application factory.
    build_app   -- Alias for create_app (used by podwatch.app bootstrap).
    QueryFacade -- Read/write surface shared by REST routes and WebSocket sessions.
"""

from podwatch.api.app import create_app
from podwatch.api.facade import QueryFacade

build_app = create_app

__all__ = ["QueryFacade", "build_app", "create_app"]
