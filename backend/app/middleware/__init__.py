# Middleware package init
"""
Selah Backend — Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit rejects over-quota clients before any other work
    2. Request ID sets the correlation id used by every later log line
    3. Logging records method, path, status and duration per request

    Responses travel back through the same chain in reverse, so the
    X-Request-ID header and the access log line are both written last.
"""
