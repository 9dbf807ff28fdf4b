"""
Access log: one line per request on the `selah.access` logger.

    GET /api/livestreams/7 200 12.4ms rid=3f9c2a1b ip=10.0.0.4

The same values ride along as `extra` fields for JSON log handlers. The
level tracks the outcome (5xx ERROR, 4xx WARNING, otherwise INFO). Health
probes are not logged, and neither are bodies or Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

access_log = logging.getLogger("selah.access")

QUIET_PATHS = frozenset({"/health"})


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    return logging.WARNING if status >= 400 else logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

        fields = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "request_id": request_id_var.get(""),
            "client_ip": request.client.host if request.client else "unknown",
        }
        access_log.log(
            level_for(response.status_code),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms rid=%(request_id)s ip=%(client_ip)s",
            fields,
            extra=fields,
        )
        return response
