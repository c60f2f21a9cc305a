"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, database pool).
Middleware, CORS, the internal-error handler and routers are all
registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fitlog import __version__
from fitlog.api import api_router
from fitlog.config import settings
from fitlog.errors import InternalError
from fitlog.log import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at shutdown.
    """
    configure_logging()
    logger.info(
        "fitlog.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("fitlog.shutdown")

    # Close database engine
    from fitlog.db.engine import engine
    await engine.dispose()


async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    """Log full detail, tell the client nothing.

    Hashing, randomness and store failures end up here. A token lookup
    that failed because the database is down lands here as a 500, not
    as a 401 — outages stay visible.
    """
    logger.error(
        "fitlog.internal_error",
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Fitlog",
        description="Workout tracking API with opaque bearer-token auth",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler

    from fitlog.middleware.request_id import RequestIdMiddleware
    from fitlog.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InternalError, internal_error_handler)

    # Mount API routes
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: fitlog.main:app)
app = create_app()
