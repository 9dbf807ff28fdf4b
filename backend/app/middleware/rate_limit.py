"""
Per-client sliding window rate limit.

Each client key keeps a deque of request times. Times older than
RATE_LIMIT_WINDOW fall off the left; a request arriving when
RATE_LIMIT_REQUESTS remain in the window is refused with 429 and a
Retry-After equal to the seconds until the oldest one expires.

The key is the socket peer address, or the first X-Forwarded-For hop with
TRUST_FORWARDED_FOR (only behind a proxy that sets the header). Counters
live in process memory, so every uvicorn worker limits independently.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.middleware.request_id import REQUEST_ID_HEADER

logger = logging.getLogger(__name__)

UNLIMITED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def client_key(request: Request, trust_forwarded_for: bool = False) -> str:
    if trust_forwarded_for:
        first_hop = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    # Idle clients are swept every this many admitted requests
    SWEEP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._hits: Dict[str, Deque[float]] = {}
        self._admitted = 0

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        key = client_key(request, settings.trust_forwarded_for)
        now = time.monotonic()
        window = settings.rate_limit_window
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - window:
            hits.popleft()

        if len(hits) >= settings.rate_limit_requests:
            retry_after = int(hits[0] + window - now) + 1
            logger.warning("Rate limit hit by %s (%d requests / %ds)", key, len(hits), window)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Retry in {retry_after} seconds.",
                    "details": {"retry_after": retry_after},
                    "request_id": request.headers.get(REQUEST_ID_HEADER, ""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._admitted += 1
        if self._admitted % self.SWEEP_EVERY == 0:
            self._sweep(now - window)
        return await call_next(request)

    def _sweep(self, cutoff: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Dropped rate limit state for %d idle clients", len(idle))
