"""
Peer Evaluation Session API

FastAPI application serving the REST endpoints and the WebSocket stream
that keeps every client in sync with submissions, finalize runs and presence.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api import routes, ws
from src.api.services import build_services
from src.config import Settings, get_settings
from src.evaluator.exceptions import InputValidationError, PersistenceError, SessionError, http_status_for

logger = logging.getLogger(__name__)


async def session_error_handler(request: Request, exc: SessionError) -> JSONResponse:
    status = http_status_for(exc)
    if isinstance(exc, PersistenceError) or status >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc, exc.context)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InputValidationError("Missing required fields", context={"errors": exc.errors()})
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content=error.to_payload())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its session services.

    Args:
        settings: Explicit settings; the cached environment settings by default.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Session server starting (dataset: %s)", settings.members_path)
        yield
        logger.info("Session server shutting down")

    app = FastAPI(
        title="Peer Evaluation Session",
        description="Live peer-evaluation scoring with real-time presence",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = build_services(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SessionError, session_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(routes.router)
    app.include_router(ws.router)
    return app
