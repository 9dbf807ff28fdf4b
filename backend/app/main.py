"""
Selah Backend — Application Entry Point
========================================

`create_app()` builds the FastAPI application; `app` is what uvicorn serves
(`uvicorn app.main:app`) and what the test suite drives through
httpx.ASGITransport.

Request path through the stack (outermost first):

    RateLimitMiddleware      429 before anything else runs
    RequestIDMiddleware      X-Request-ID in, out, and in every log line
    RequestLoggingMiddleware one access line per request
    GZipMiddleware           bodies over 500 bytes
    CORSMiddleware           browser front end origins
    router                   health · bible · highlights · notes · hymns ·
                             livestreams · references · library ·
                             gutenberg · preferences

Startup logs configuration problems instead of refusing to boot (the
annotator is optional), then runs the idempotent seeder when
SEED_ON_STARTUP is set. Shutdown disposes the engine's pool.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import async_session_factory, dispose_engine
from app.exceptions import SelahError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import (
    bible,
    gutenberg,
    health,
    highlights,
    hymns,
    library,
    livestreams,
    notes,
    preferences,
    references,
)
from app.seed.seeder import run_seed

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Libraries that are chatty at INFO/DEBUG
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx")


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def seed_database() -> None:
    """Run the seeder in its own session; one commit for the whole run."""
    async with async_session_factory() as session:
        inserted = await run_seed(session)
        await session.commit()
    logger.info("Seeding finished: %s", ", ".join(f"{k}={v}" for k, v in inserted.items()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    logger.info("Selah API %s starting", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration problem (continuing): %s", str(e))

    if settings.seed_on_startup:
        await seed_database()

    logger.info(
        "Listening on http://%s:%d (docs at /docs)", settings.backend_host, settings.backend_port
    )
    yield

    await dispose_engine()
    logger.info("Selah API stopped")


# ── Error envelope ────────────────────────────────────────────────────────


def error_body(
    error: str, message: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Every non-2xx body: {error, message, details?, request_id}."""
    body: Dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


async def handle_selah_error(request: Request, exc: SelahError) -> JSONResponse:
    logger.log(
        exc.log_level,
        "[%s] %s %s -> %d %s: %s | %s",
        request_id_var.get(""),
        request.method,
        request.url.path,
        exc.status_code,
        type(exc).__name__,
        exc.message,
        exc.context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_code, exc.public_message, exc.public_details()),
        headers=exc.headers(),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "[%s] Unhandled %s on %s %s",
        request_id_var.get(""),
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Subclasses resolve to the SelahError handler through the MRO
    app.add_exception_handler(SelahError, handle_selah_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


# ── Factory ───────────────────────────────────────────────────────────────


def create_app() -> FastAPI:
    app = FastAPI(
        title="Selah API",
        description=(
            "Bible reading, hymnal, devotional library and livestream companion "
            "with AI transcript annotation."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # add_middleware prepends, so the last one added is the outermost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    for module in (
        health,
        bible,
        highlights,
        notes,
        hymns,
        livestreams,
        references,
        library,
        gutenberg,
        preferences,
    ):
        app.include_router(module.router)

    return app


app = create_app()
