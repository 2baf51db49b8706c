"""
BlogQL — FastAPI Application Factory
=====================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn blogql.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐  │
    │  │ Req ID   │→│ Logging  │→│ Auth │→│ GZip/CORS  │  │
    │  └──────────┘ └──────────┘ └──────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌────────────────┐ ┌───────────┐  │
    │  │ /graphql     │ │ PUT /post-image│ │ GET       │  │
    │  │ (strawberry) │ │ GET /images/*  │ │ /health   │  │
    │  └──────────────┘ └────────────────┘ └───────────┘  │
    │                                                     │
    │  Exception Handlers (REST routes):                  │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ BlogError → its code │ Exception → 500       │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

GraphQL errors never reach these handlers; strawberry reports them in the
response's `errors` array (see blogql.graphql.errors).

Lifecycle:
    Startup:  logging, storage directory
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from blogql import __version__
from blogql.config import settings
from blogql.database import dispose_engine
from blogql.exceptions import BlogError
from blogql.graphql.errors import UNEXPECTED_ERROR_MESSAGE
from blogql.graphql.schema import create_graphql_router
from blogql.middleware.auth import AuthMiddleware
from blogql.middleware.logging import RequestLoggingMiddleware
from blogql.middleware.request_id import RequestIDMiddleware, request_id_var
from blogql.routes import health, images
from blogql.schemas.blog import ErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before any other initialization.
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("strawberry.execution").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("BlogQL %s starting up...", __version__)

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Image storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    if settings.graphiql:
        logger.info(
            "GraphiQL: http://%s:%d/graphql", settings.backend_host, settings.backend_port
        )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("BlogQL shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions raised by REST routes to `{message, status, data}` bodies.

    Handler hierarchy:
        BlogError (and subclasses) → exc.code (401, 403, 404, 409, 422, 500)
        Exception (fallback)       → 500, generic message

    5xx details (file paths, SQL) are logged server-side, never returned.
    """

    @app.exception_handler(BlogError)
    async def handle_blog_error(request: Request, exc: BlogError):
        rid = request_id_var.get("")
        if exc.code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        body = ErrorResponse(message=exc.message, status=exc.code, data=exc.data)
        return JSONResponse(
            status_code=exc.code,
            content=body.model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        body = ErrorResponse(message=UNEXPECTED_ERROR_MESSAGE, status=500)
        return JSONResponse(
            status_code=500,
            content=body.model_dump(exclude_none=True),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="BlogQL API",
        description=(
            "Blogging backend with a GraphQL API for users and posts, "
            "plus REST endpoints for post images."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → Auth → GZip → CORS → route

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    # Annotates request.state.auth; never rejects
    app.add_middleware(AuthMiddleware)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(create_graphql_router(), prefix="/graphql")
    app.include_router(images.router)
    app.include_router(health.router)

    return app


# uvicorn expects `blogql.main:app` to be importable
app = create_app()
