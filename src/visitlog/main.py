"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (tables, initial admin,
engine disposal). Middleware, CORS, exception handlers, and routers
are all registered here.

Every error leaves the service as {"error": "<message>"}: the handlers
below translate HTTPException, request validation errors, and storage
failures into that shape.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from visitlog import __version__
from visitlog.api import api_router
from visitlog.config import settings
from visitlog.store import StoreError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    logger.info(
        "visitlog.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from visitlog.db.engine import engine, init_db
    await init_db(engine, settings)

    yield

    logger.info("visitlog.shutdown")
    await engine.dispose()


# ─── Exception handlers ─────────────────────────────────


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "invalid request") if errors else "invalid request"
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {message}"})


async def store_error_handler(request: Request, exc: StoreError):
    # Backend detail goes to the log only
    logger.error("store.error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "internal server error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="visitlog",
        description="Records the paths each authenticated user visits",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler

    from visitlog.middleware.request_id import RequestIdMiddleware
    from visitlog.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "HEAD", "OPTIONS"],
        allow_headers=["X-Requested-With", "Content-Type", "Authorization"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: visitlog.main:app)
app = create_app()
