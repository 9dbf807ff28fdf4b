"""
Selah Backend — Bible Reading Routes
=====================================

Public (no auth) scripture endpoints:
    GET /api/verse-of-day?translation=
    GET /api/bible/translations
    GET /api/bible/chapters/{book}?translation=
    GET /api/bible/search/{query}?translation=
    GET /api/bible/{book}/{chapter}?translation=

Route order matters: the fixed-prefix routes (translations, chapters, search)
are declared before the catch-all /bible/{book}/{chapter}.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import NotFoundError
from app.schemas.bible import ChapterCountResponse, VerseResponse
from app.schemas.common import ErrorResponse
from app.services.bible_service import bible_service

router = APIRouter(prefix="/api", tags=["Bible"])


@router.get(
    "/verse-of-day",
    response_model=VerseResponse,
    responses={404: {"description": "No verses seeded", "model": ErrorResponse}},
    summary="Deterministic verse for today's date",
)
async def verse_of_day(
    translation: Optional[str] = Query(default=None, max_length=20),
    db: AsyncSession = Depends(get_db_session),
):
    verse = await bible_service.get_verse_of_day(db, translation=translation)
    if verse is None:
        raise NotFoundError(resource="verse of the day")
    return verse


@router.get("/bible/translations", response_model=List[str], summary="Seeded translations")
async def list_translations(db: AsyncSession = Depends(get_db_session)):
    return await bible_service.list_translations(db)


@router.get(
    "/bible/chapters/{book}",
    response_model=ChapterCountResponse,
    summary="Number of chapters in a book (1 when the book has no verses)",
)
async def chapter_count(
    book: str = Path(min_length=1, max_length=50),
    translation: Optional[str] = Query(default=None, max_length=20),
    db: AsyncSession = Depends(get_db_session),
):
    count = await bible_service.get_chapter_count(db, book, translation)
    return ChapterCountResponse(
        book=book,
        translation=translation or settings.default_translation,
        count=count,
    )


@router.get(
    "/bible/search/{query}",
    response_model=List[VerseResponse],
    summary="Case-insensitive verse text search (at most 50 results)",
)
async def search_verses(
    query: str = Path(min_length=1, max_length=200),
    translation: Optional[str] = Query(default=None, max_length=20),
    db: AsyncSession = Depends(get_db_session),
):
    return await bible_service.search_verses(db, query, translation)


@router.get(
    "/bible/{book}/{chapter}",
    response_model=List[VerseResponse],
    summary="All verses of a chapter in verse order",
)
async def read_chapter(
    book: str = Path(min_length=1, max_length=50),
    chapter: int = Path(ge=1),
    translation: Optional[str] = Query(default=None, max_length=20),
    db: AsyncSession = Depends(get_db_session),
):
    return await bible_service.get_verses(db, book, chapter, translation)
