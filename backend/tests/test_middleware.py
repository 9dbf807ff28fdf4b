"""
Selah Backend — Middleware Tests
=================================

Rate limiting and request ids, exercised on a bare FastAPI app so the
limits can be tiny without touching the real application instance.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from app.config import settings
from app.middleware.rate_limit import RateLimitMiddleware, client_key
from app.middleware.request_id import RequestIDMiddleware, request_id_var


def _app() -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"rid": request_id_var.get("")}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)
    return app


def _request(headers=None, host="10.0.0.1") -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "headers": raw, "client": (host, 1234)})


@pytest.fixture
def small_limit(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_requests", 2)
    monkeypatch.setattr(settings, "rate_limit_window", 60)


@pytest.mark.asyncio
async def test_third_request_in_window_is_429(small_limit):
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        assert (await client.get("/ping")).status_code == 200
        assert (await client.get("/ping")).status_code == 200
        blocked = await client.get("/ping", headers={"X-Request-ID": "r-429"})

    assert blocked.status_code == 429
    assert 1 <= int(blocked.headers["Retry-After"]) <= 61
    body = blocked.json()
    assert body["error"] == "rate_limit_exceeded"
    assert body["request_id"] == "r-429"


@pytest.mark.asyncio
async def test_health_is_never_limited(small_limit):
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        statuses = [(await client.get("/health")).status_code for _ in range(5)]
    assert statuses == [200] * 5


@pytest.mark.asyncio
async def test_request_id_generated_and_visible_to_handlers():
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        response = await client.get("/ping")
    rid = response.headers["X-Request-ID"]
    assert len(rid) == 8
    assert response.json() == {"rid": rid}


def test_client_key_ignores_forwarded_for_by_default():
    request = _request({"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})
    assert client_key(request) == "10.0.0.1"
    assert client_key(request, trust_forwarded_for=True) == "203.0.113.9"
    assert client_key(_request(), trust_forwarded_for=True) == "10.0.0.1"
