"""
Selah Backend
=============

Bible reader, hymnal, devotional library and livestream companion API.

Layout:
    routes/      FastAPI routers: HTTP shapes, auth dependencies, status codes
    services/    business rules: ownership scoping, upserts, AI annotation
    models/      SQLAlchemy tables           schemas/  pydantic wire models
    middleware/  rate limit, request id, access log
    seed/        idempotent reference data loader
    companion/   client-side half of the livestream companion; talks to the
                 API over HTTP only
"""

__version__ = "1.0.0"
