"""FastAPI application factory for podwatch.

Usage::

    from podwatch.api.app import create_app

    app = create_app(facade=facade, broadcaster=broadcaster, config=config)

The factory is designed for use by both the production bootstrap
(``podwatch.app``) and unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from podwatch.api.facade import QueryFacade
from podwatch.api.routes import router
from podwatch.api.schemas import ErrorResponse
from podwatch.broadcast.broadcaster import Broadcaster
from podwatch.errors import RequestError

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(
    facade: QueryFacade,
    broadcaster: Broadcaster,
    config: Any = None,
) -> FastAPI:
    """Create and configure the podwatch FastAPI application.

    Args:
        facade:      QueryFacade serving every REST read/write.
        broadcaster: Broadcaster that WebSocket sessions subscribe to.
        config:      Optional PodwatchConfig, kept for metadata.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from podwatch import __version__

    app = FastAPI(
        title="podwatch",
        summary="Kubernetes pod monitor and lifecycle control API",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.facade = facade
    app.state.broadcaster = broadcaster
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to the error envelope as a 400."""
        errors = exc.errors()
        first_field = ""
        first_msg = ""
        if errors:
            locs = errors[0].get("loc", ())
            first_field = str(locs[-1]) if locs else ""
            first_msg = str(errors[0].get("msg", ""))
        detail = f"{first_field}: {first_msg}" if first_field else first_msg
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=detail).model_dump(),
        )

    @app.exception_handler(RequestError)
    async def request_error_handler(
        _request: Request,
        exc: RequestError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
