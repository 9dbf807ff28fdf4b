"""
Public book catalog routes (authenticated).

    GET  /api/gutenberg/search?q=            proxy to the Gutendex catalog
    POST /api/gutenberg/import {gutenbergId} import as a private devotional book

Upstream failures answer 502; an unknown catalog id answers 404.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.schemas.common import ErrorResponse
from app.schemas.library import (
    CatalogImportRequest,
    CatalogSearchResponse,
    DevotionalBookResponse,
)
from app.services.gutenberg_service import gutenberg_service
from app.services.identity_service import AuthenticatedUser

router = APIRouter(prefix="/api/gutenberg", tags=["Gutenberg"])

UPSTREAM = {502: {"description": "Catalog unavailable", "model": ErrorResponse}}


@router.get("/search", response_model=CatalogSearchResponse, responses=UPSTREAM)
async def search_catalog(
    q: str = Query(min_length=1, max_length=200),
    user: AuthenticatedUser = Depends(get_current_user),
):
    return CatalogSearchResponse(results=await gutenberg_service.search(q))


@router.post(
    "/import",
    response_model=DevotionalBookResponse,
    status_code=201,
    responses={**UPSTREAM, 404: {"description": "Unknown catalog id", "model": ErrorResponse}},
)
async def import_book(
    body: CatalogImportRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await gutenberg_service.import_book(db, user.id, body.gutenberg_id)
