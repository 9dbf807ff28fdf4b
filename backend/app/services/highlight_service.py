"""
Selah Backend — Highlight & Saved Verse Service
================================================

What:  Per-user verse annotations: color highlights and bookmarks.
Who:   Called by routes/highlights.py.

Write semantics:
    - save_highlight() is an upsert keyed by (user_id, verse_id): a second
      save for the same verse overwrites color and note (last write wins).
    - save_verse() is idempotent: saving an already-saved verse returns the
      existing row.
    - Deletes match on (id, user_id). Zero matched rows is not an error.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.bible import BibleVerse, Highlight, SavedVerse
from app.schemas.bible import (
    HighlightWithVerseResponse,
    SavedVerseWithVerseResponse,
    VerseResponse,
)
from app.services.bible_service import bible_service

logger = logging.getLogger(__name__)


class HighlightService:

    # ── Highlights ────────────────────────────────────────────────────────

    async def list_highlights(self, db: AsyncSession, user_id: str) -> List[Highlight]:
        try:
            result = await db.execute(
                select(Highlight).where(Highlight.user_id == user_id).order_by(Highlight.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing highlights: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def list_highlights_with_verses(
        self, db: AsyncSession, user_id: str
    ) -> List[HighlightWithVerseResponse]:
        """Highlights joined with their verse text (inner join: orphaned rows are skipped)."""
        try:
            result = await db.execute(
                select(Highlight, BibleVerse)
                .join(BibleVerse, Highlight.verse_id == BibleVerse.id)
                .where(Highlight.user_id == user_id)
                .order_by(Highlight.id)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing highlights with verses: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})

        return [
            HighlightWithVerseResponse(
                id=h.id,
                user_id=h.user_id,
                verse_id=h.verse_id,
                color=h.color,
                note=h.note,
                created_at=h.created_at,
                verse=VerseResponse.model_validate(v),
            )
            for h, v in rows
        ]

    async def save_highlight(
        self,
        db: AsyncSession,
        user_id: str,
        verse_id: int,
        color: str = "yellow",
        note: Optional[str] = None,
    ) -> Highlight:
        """
        Create or update the caller's highlight on a verse.

        Raises:
            NotFoundError: The verse does not exist (→ 404)
        """
        await bible_service.get_verse(db, verse_id)

        try:
            result = await db.execute(
                select(Highlight).where(
                    Highlight.user_id == user_id,
                    Highlight.verse_id == verse_id,
                )
            )
            highlight = result.scalar_one_or_none()

            if highlight is not None:
                highlight.color = color
                highlight.note = note
                await db.flush()
                logger.info("Highlight %d updated (verse=%d, color=%s)", highlight.id, verse_id, color)
                return highlight

            highlight = Highlight(user_id=user_id, verse_id=verse_id, color=color, note=note)
            db.add(highlight)
            await db.flush()
            logger.info("Highlight %d created (verse=%d, color=%s)", highlight.id, verse_id, color)
            return highlight
        except SQLAlchemyError as e:
            logger.error("Database error saving highlight: %s", str(e))
            raise DatabaseError(context={"verse_id": verse_id})

    async def delete_highlight(self, db: AsyncSession, highlight_id: int, user_id: str) -> int:
        """Returns the number of rows removed (0 when missing or owned by someone else)."""
        try:
            result = await db.execute(
                delete(Highlight).where(Highlight.id == highlight_id, Highlight.user_id == user_id)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error deleting highlight %d: %s", highlight_id, str(e))
            raise DatabaseError(context={"highlight_id": highlight_id})

    # ── Saved verses ──────────────────────────────────────────────────────

    async def list_saved_verses(
        self, db: AsyncSession, user_id: str
    ) -> List[SavedVerseWithVerseResponse]:
        try:
            result = await db.execute(
                select(SavedVerse, BibleVerse)
                .join(BibleVerse, SavedVerse.verse_id == BibleVerse.id)
                .where(SavedVerse.user_id == user_id)
                .order_by(SavedVerse.created_at.desc(), SavedVerse.id.desc())
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing saved verses: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})

        return [
            SavedVerseWithVerseResponse(
                id=s.id,
                user_id=s.user_id,
                verse_id=s.verse_id,
                created_at=s.created_at,
                verse=VerseResponse.model_validate(v),
            )
            for s, v in rows
        ]

    async def save_verse(self, db: AsyncSession, user_id: str, verse_id: int) -> SavedVerse:
        await bible_service.get_verse(db, verse_id)
        try:
            result = await db.execute(
                select(SavedVerse).where(
                    SavedVerse.user_id == user_id,
                    SavedVerse.verse_id == verse_id,
                )
            )
            existing = result.scalar_one_or_none()
            if existing is not None:
                return existing

            saved = SavedVerse(user_id=user_id, verse_id=verse_id)
            db.add(saved)
            await db.flush()
            return saved
        except SQLAlchemyError as e:
            logger.error("Database error saving verse %d: %s", verse_id, str(e))
            raise DatabaseError(context={"verse_id": verse_id})

    async def delete_saved_verse(self, db: AsyncSession, saved_id: int, user_id: str) -> int:
        try:
            result = await db.execute(
                delete(SavedVerse).where(SavedVerse.id == saved_id, SavedVerse.user_id == user_id)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error deleting saved verse %d: %s", saved_id, str(e))
            raise DatabaseError(context={"saved_verse_id": saved_id})


highlight_service = HighlightService()
