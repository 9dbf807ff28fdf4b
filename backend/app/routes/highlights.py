"""
Verse highlight and saved-verse routes (authenticated).

    GET    /api/highlights           caller's highlights
    GET    /api/highlights/full      ... joined with verse text
    POST   /api/highlights           upsert by (user, verse)
    DELETE /api/highlights/{id}      scoped; always {"success": true}
    GET    /api/saved-verses         saved verses with verse text
    POST   /api/saved-verses         idempotent
    DELETE /api/saved-verses/{id}    scoped; always {"success": true}
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.schemas.bible import (
    HighlightCreate,
    HighlightResponse,
    HighlightWithVerseResponse,
    SavedVerseCreate,
    SavedVerseResponse,
    SavedVerseWithVerseResponse,
)
from app.schemas.common import SuccessResponse
from app.services.highlight_service import highlight_service
from app.services.identity_service import AuthenticatedUser

router = APIRouter(prefix="/api", tags=["Highlights"])


@router.get("/highlights", response_model=List[HighlightResponse])
async def list_highlights(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await highlight_service.list_highlights(db, user.id)


@router.get("/highlights/full", response_model=List[HighlightWithVerseResponse])
async def list_highlights_full(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await highlight_service.list_highlights_with_verses(db, user.id)


@router.post("/highlights", response_model=HighlightResponse)
async def save_highlight(
    body: HighlightCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Create the highlight, or update color/note if this verse is already highlighted."""
    return await highlight_service.save_highlight(
        db, user.id, verse_id=body.verse_id, color=body.color, note=body.note
    )


@router.delete("/highlights/{highlight_id}", response_model=SuccessResponse)
async def delete_highlight(
    highlight_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await highlight_service.delete_highlight(db, highlight_id, user.id)
    return SuccessResponse()


@router.get("/saved-verses", response_model=List[SavedVerseWithVerseResponse])
async def list_saved_verses(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await highlight_service.list_saved_verses(db, user.id)


@router.post("/saved-verses", response_model=SavedVerseResponse)
async def save_verse(
    body: SavedVerseCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await highlight_service.save_verse(db, user.id, body.verse_id)


@router.delete("/saved-verses/{saved_id}", response_model=SuccessResponse)
async def delete_saved_verse(
    saved_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await highlight_service.delete_saved_verse(db, saved_id, user.id)
    return SuccessResponse()
