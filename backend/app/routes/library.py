"""
Selah Backend — Devotional Library Routes
==========================================

Optional auth (public books for everyone, private imports for their owner):
    GET /api/devotional-books
    GET /api/devotional-books/{id}          with chapter list
    GET /api/devotional-chapters/{id}

Authenticated:
    GET  /api/book-progress                 all of the caller's progress rows
    GET  /api/book-progress/{bookId}
    POST /api/book-progress                 upsert by (user, book)
    GET  /api/book-highlights[/{chapterId}]
    POST /api/book-highlights
    DELETE /api/book-highlights/{id}        scoped; always {"success": true}

Public:
    GET /api/devotionals/today
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user, get_optional_user
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.library import (
    BookHighlightCreate,
    BookHighlightResponse,
    BookProgressResponse,
    BookProgressUpdate,
    DailyDevotionalResponse,
    DevotionalBookDetailResponse,
    DevotionalBookResponse,
    DevotionalChapterResponse,
    DevotionalChapterSummary,
)
from app.services.identity_service import AuthenticatedUser
from app.services.library_service import library_service

router = APIRouter(prefix="/api", tags=["Library"])


def _uid(user: Optional[AuthenticatedUser]) -> Optional[str]:
    return user.id if user is not None else None


# ── Books & chapters ──────────────────────────────────────────────────────


@router.get("/devotional-books", response_model=List[DevotionalBookResponse])
async def list_books(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.list_books(db, _uid(user))


@router.get(
    "/devotional-books/{book_id}",
    response_model=DevotionalBookDetailResponse,
    responses={404: {"description": "Book not found", "model": ErrorResponse}},
)
async def get_book(
    book_id: int,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
):
    book, chapters = await library_service.get_book(db, book_id, _uid(user))
    detail = DevotionalBookDetailResponse.model_validate(book)
    detail.chapters = [DevotionalChapterSummary.model_validate(c) for c in chapters]
    return detail


@router.get(
    "/devotional-chapters/{chapter_id}",
    response_model=DevotionalChapterResponse,
    responses={404: {"description": "Chapter not found", "model": ErrorResponse}},
)
async def get_chapter(
    chapter_id: int,
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.get_chapter(db, chapter_id, _uid(user))


# ── Reading progress ──────────────────────────────────────────────────────


@router.get("/book-progress", response_model=List[BookProgressResponse])
async def list_progress(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.list_progress(db, user.id)


@router.get(
    "/book-progress/{book_id}",
    response_model=BookProgressResponse,
    responses={404: {"description": "No progress for this book", "model": ErrorResponse}},
)
async def get_progress(
    book_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.get_progress(db, user.id, book_id)


@router.post("/book-progress", response_model=BookProgressResponse)
async def save_progress(
    body: BookProgressUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.save_progress(
        db, user.id, body.book_id, current_chapter_id=body.current_chapter_id
    )


# ── Book highlights ───────────────────────────────────────────────────────


@router.get("/book-highlights", response_model=List[BookHighlightResponse])
async def list_book_highlights(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.list_highlights(db, user.id)


@router.get("/book-highlights/{chapter_id}", response_model=List[BookHighlightResponse])
async def list_chapter_highlights(
    chapter_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.list_highlights(db, user.id, chapter_id=chapter_id)


@router.post("/book-highlights", response_model=BookHighlightResponse, status_code=201)
async def create_book_highlight(
    body: BookHighlightCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await library_service.create_highlight(
        db,
        user.id,
        chapter_id=body.chapter_id,
        start_offset=body.start_offset,
        end_offset=body.end_offset,
        color=body.color,
        note=body.note,
    )


@router.delete("/book-highlights/{highlight_id}", response_model=SuccessResponse)
async def delete_book_highlight(
    highlight_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await library_service.delete_highlight(db, highlight_id, user.id)
    return SuccessResponse()


# ── Daily devotional ──────────────────────────────────────────────────────


@router.get(
    "/devotionals/today",
    response_model=DailyDevotionalResponse,
    responses={404: {"description": "No devotionals seeded", "model": ErrorResponse}},
)
async def devotional_today(db: AsyncSession = Depends(get_db_session)):
    return await library_service.get_devotional_for_day(db)
