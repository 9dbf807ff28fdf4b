"""
Selah Backend — Bible Service
==============================

What:  Read-side queries over `bible_verses`: chapters, chapter counts, text
       search, the verse of the day and the list of seeded translations.
Who:   Called by routes/bible.py and by other services that need to resolve
       a verse id (highlights, saved verses, study notes).

Verse of the Day:
    Deterministic for a given date: CURATED[day_of_year % len(CURATED)].
    Every caller on the same day sees the same verse. If the curated verse is
    not seeded for the requested translation, the lowest-id verse of that
    translation is used instead; with no verses at all the result is None.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError, NotFoundError
from app.models.bible import BibleVerse

logger = logging.getLogger(__name__)


# (book, chapter, verse); book names match the seeded `bible_verses.book` spelling
CURATED: Tuple[Tuple[str, int, int], ...] = (
    ("John", 3, 16),
    ("Psalms", 23, 1),
    ("Proverbs", 3, 5),
    ("Jeremiah", 29, 11),
    ("Philippians", 4, 13),
    ("Romans", 8, 28),
    ("Isaiah", 40, 31),
    ("Joshua", 1, 9),
    ("Matthew", 11, 28),
    ("Psalms", 46, 10),
    ("Lamentations", 3, 23),
    ("2 Corinthians", 5, 17),
    ("Hebrews", 11, 1),
    ("Psalms", 119, 105),
    ("Galatians", 5, 22),
    ("Ephesians", 2, 8),
    ("1 John", 4, 19),
    ("Psalms", 23, 4),
    ("Proverbs", 3, 6),
    ("John", 3, 17),
)


class BibleService:
    """Stateless query helpers for scripture text."""

    async def get_verses(
        self, db: AsyncSession, book: str, chapter: int, translation: Optional[str] = None
    ) -> List[BibleVerse]:
        """All verses of one chapter, ordered by verse number. Empty list if none."""
        translation = translation or settings.default_translation
        try:
            result = await db.execute(
                select(BibleVerse)
                .where(
                    BibleVerse.translation == translation,
                    BibleVerse.book == book,
                    BibleVerse.chapter == chapter,
                )
                .order_by(BibleVerse.verse)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error reading %s %s %d: %s", translation, book, chapter, str(e))
            raise DatabaseError(context={"book": book, "chapter": chapter})

    async def get_chapter_count(
        self, db: AsyncSession, book: str, translation: Optional[str] = None
    ) -> int:
        """
        Highest chapter number seeded for `book`, or 1 when the book has no rows.

        The fallback keeps chapter pickers usable for books that were not seeded.
        """
        translation = translation or settings.default_translation
        try:
            result = await db.execute(
                select(func.max(BibleVerse.chapter)).where(
                    BibleVerse.translation == translation,
                    BibleVerse.book == book,
                )
            )
            highest = result.scalar()
        except SQLAlchemyError as e:
            logger.error("Database error counting chapters for %s: %s", book, str(e))
            raise DatabaseError(context={"book": book})
        return highest if highest else 1

    async def search_verses(
        self,
        db: AsyncSession,
        query: str,
        translation: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[BibleVerse]:
        """Case-insensitive substring search over verse text (at most `bible_search_limit` rows)."""
        translation = translation or settings.default_translation
        limit = limit or settings.bible_search_limit
        needle = query.strip()
        if not needle:
            return []
        try:
            result = await db.execute(
                select(BibleVerse)
                .where(
                    BibleVerse.translation == translation,
                    BibleVerse.text.ilike(f"%{needle}%"),
                )
                .order_by(BibleVerse.id)
                .limit(limit)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error searching verses: %s", str(e))
            raise DatabaseError(context={"query": needle})

    async def get_verse(self, db: AsyncSession, verse_id: int) -> BibleVerse:
        try:
            verse = await db.get(BibleVerse, verse_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching verse %d: %s", verse_id, str(e))
            raise DatabaseError(context={"verse_id": verse_id})
        if verse is None:
            raise NotFoundError(resource="verse", resource_id=str(verse_id))
        return verse

    async def get_verses_by_ids(
        self, db: AsyncSession, verse_ids: Sequence[int]
    ) -> dict:
        """Map of id → BibleVerse for the given ids (missing ids are simply absent)."""
        if not verse_ids:
            return {}
        result = await db.execute(select(BibleVerse).where(BibleVerse.id.in_(set(verse_ids))))
        return {v.id: v for v in result.scalars().all()}

    async def get_verse_of_day(
        self,
        db: AsyncSession,
        translation: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Optional[BibleVerse]:
        """
        Deterministic date-derived verse.

        Args:
            translation: Defaults to settings.default_translation.
            today: Injected for tests; defaults to the server's local date.

        Returns:
            The curated verse for the day, the first verse of the translation
            as a fallback, or None when the translation has no verses.
        """
        translation = translation or settings.default_translation
        today = today or date.today()
        book, chapter, verse_num = CURATED[today.timetuple().tm_yday % len(CURATED)]

        try:
            result = await db.execute(
                select(BibleVerse)
                .where(
                    BibleVerse.translation == translation,
                    BibleVerse.book == book,
                    BibleVerse.chapter == chapter,
                    BibleVerse.verse == verse_num,
                )
                .limit(1)
            )
            verse = result.scalar_one_or_none()
            if verse is not None:
                return verse

            logger.debug(
                "Curated verse %s %d:%d missing for %s, falling back to first verse",
                book, chapter, verse_num, translation,
            )
            result = await db.execute(
                select(BibleVerse)
                .where(BibleVerse.translation == translation)
                .order_by(BibleVerse.id)
                .limit(1)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error selecting verse of the day: %s", str(e))
            raise DatabaseError(context={"translation": translation})

    async def list_translations(self, db: AsyncSession) -> List[str]:
        try:
            result = await db.execute(
                select(BibleVerse.translation).distinct().order_by(BibleVerse.translation)
            )
            return [row for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing translations: %s", str(e))
            raise DatabaseError()


bible_service = BibleService()
