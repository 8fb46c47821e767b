"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (the database pool).
Middleware, CORS, exception handlers and routers all registered here.

Error mapping lives here too:
- AppError (taskboard.errors)    → its own status code + {"error": ...}
- request validation failures    → 400 with field-level details
- anything else                  → logged, generic 500, no internals leaked
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard import __version__
from taskboard.api import api_router
from taskboard.config import Settings, settings
from taskboard.db.engine import Database
from taskboard.errors import AppError, InternalError, Unauthorized
from taskboard.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    config: Settings = app.state.settings
    logger.info(
        "taskboard.starting",
        version=__version__,
        environment=config.environment,
        port=config.port,
    )

    database = Database.from_settings(config)
    app.state.database = database
    if config.create_tables_on_startup:
        await database.create_tables()
        logger.info("taskboard.tables_created")

    yield

    logger.info("taskboard.shutdown")
    await database.dispose()


# ─── Exception handlers ─────────────────────────────────


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_dict(), headers=headers
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400, content={"error": "Invalid data", "details": details}
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request.unhandled_error", method=request.method, path=request.url.path
    )
    return JSONResponse(status_code=500, content=InternalError().to_dict())


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or settings
    configure_logging(config)

    app = FastAPI(
        title="Taskboard",
        description="Shared, role-gated todo tracking API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from taskboard.middleware.request_id import RequestIdMiddleware
    from taskboard.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskboard.main:app)
app = create_app()
