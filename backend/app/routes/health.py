"""
GET /health: liveness and dependency status for probes and dashboards.

    status     healthy | degraded | unhealthy
    database   connected | disconnected       (SELECT 1 on the engine)
    gemini     available | unavailable | circuit_open | not_configured

Only the database decides "unhealthy". A failing annotator degrades the
service; a missing Gemini key is a supported configuration and stays healthy.
Excluded from rate limiting and from the access log.
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


async def _database_status() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health: database unreachable: %s", str(e))
        return "disconnected"
    return "connected"


async def _gemini_status() -> str:
    if not settings.gemini_configured:
        return "not_configured"
    if gemini_service.circuit_breaker.state == gemini_service.circuit_breaker.OPEN:
        return "circuit_open"
    return "available" if await gemini_service.health_check() else "unavailable"


@router.get("/health", response_model=HealthResponse, summary="Service and dependency status")
async def health_check() -> HealthResponse:
    database = await _database_status()
    gemini = await _gemini_status()

    if database != "connected":
        status = "unhealthy"
    elif gemini in ("circuit_open", "unavailable"):
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        version=__version__,
        database=database,
        gemini=gemini,
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
