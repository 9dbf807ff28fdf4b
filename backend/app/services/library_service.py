"""
Selah Backend — Devotional Library Service
===========================================

What:  Devotional books and chapters, reading progress, in-chapter
       highlights and the daily devotional.
Who:   Called by routes/library.py and by GutenbergService (persisting imports).

Visibility:
    A book is visible to a caller when it is public OR the caller owns it.
    Anonymous callers see public books only. A book that is not visible is
    reported as not found, and so are its chapters.

Daily devotional:
    Exact day-of-year match first. When the table has no row for today
    (partial seed), readings cycle: the ((day - 1) % count)-th reading in
    day_of_year order. No readings at all → NotFoundError.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models._columns import utcnow
from app.models.library import (
    BookHighlight,
    BookProgress,
    DailyDevotional,
    DevotionalBook,
    DevotionalChapter,
)

logger = logging.getLogger(__name__)


class LibraryService:

    def _visible(self, user_id: Optional[str]):
        if user_id is None:
            return DevotionalBook.is_public.is_(True)
        return or_(DevotionalBook.is_public.is_(True), DevotionalBook.owner_id == user_id)

    # ── Books & chapters ──────────────────────────────────────────────────

    async def list_books(self, db: AsyncSession, user_id: Optional[str]) -> List[DevotionalBook]:
        try:
            result = await db.execute(
                select(DevotionalBook).where(self._visible(user_id)).order_by(DevotionalBook.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing devotional books: %s", str(e))
            raise DatabaseError()

    async def get_book(
        self, db: AsyncSession, book_id: int, user_id: Optional[str]
    ) -> Tuple[DevotionalBook, List[DevotionalChapter]]:
        """Book plus its chapters in reading order."""
        result = await db.execute(
            select(DevotionalBook).where(DevotionalBook.id == book_id, self._visible(user_id))
        )
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFoundError(resource="devotional book", resource_id=str(book_id))

        chapters = await db.execute(
            select(DevotionalChapter)
            .where(DevotionalChapter.book_id == book_id)
            .order_by(DevotionalChapter.order_index, DevotionalChapter.id)
        )
        return book, list(chapters.scalars().all())

    async def get_chapter(
        self, db: AsyncSession, chapter_id: int, user_id: Optional[str]
    ) -> DevotionalChapter:
        result = await db.execute(
            select(DevotionalChapter)
            .join(DevotionalBook, DevotionalChapter.book_id == DevotionalBook.id)
            .where(DevotionalChapter.id == chapter_id, self._visible(user_id))
        )
        chapter = result.scalar_one_or_none()
        if chapter is None:
            raise NotFoundError(resource="chapter", resource_id=str(chapter_id))
        return chapter

    async def create_book(
        self,
        db: AsyncSession,
        title: str,
        chapters: Sequence[Tuple[str, str]],
        owner_id: Optional[str] = None,
        author: Optional[str] = None,
        description: Optional[str] = None,
        cover_color: str = "#2c4a6e",
        is_public: bool = True,
        source: Optional[str] = None,
        source_id: Optional[str] = None,
    ) -> DevotionalBook:
        """
        Insert a book and its (title, content) chapters; order_index follows
        the sequence order starting at 0.
        """
        book = DevotionalBook(
            owner_id=owner_id,
            title=title,
            author=author,
            description=description,
            cover_color=cover_color,
            is_public=is_public,
            source=source,
            source_id=source_id,
        )
        db.add(book)
        try:
            await db.flush()
            db.add_all(
                DevotionalChapter(book_id=book.id, title=ch_title, content=content, order_index=i)
                for i, (ch_title, content) in enumerate(chapters)
            )
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating devotional book '%s': %s", title, str(e))
            raise DatabaseError(context={"title": title})

        logger.info("Devotional book %d created ('%s', %d chapters)", book.id, title, len(chapters))
        return book

    # ── Reading progress ──────────────────────────────────────────────────

    async def list_progress(self, db: AsyncSession, user_id: str) -> List[BookProgress]:
        result = await db.execute(
            select(BookProgress)
            .where(BookProgress.user_id == user_id)
            .order_by(BookProgress.last_read_at.desc())
        )
        return list(result.scalars().all())

    async def get_progress(self, db: AsyncSession, user_id: str, book_id: int) -> BookProgress:
        result = await db.execute(
            select(BookProgress).where(BookProgress.user_id == user_id, BookProgress.book_id == book_id)
        )
        progress = result.scalar_one_or_none()
        if progress is None:
            raise NotFoundError(resource="book progress", resource_id=str(book_id))
        return progress

    async def save_progress(
        self,
        db: AsyncSession,
        user_id: str,
        book_id: int,
        current_chapter_id: Optional[int] = None,
    ) -> BookProgress:
        """Upsert keyed by (user_id, book_id); the chapter must belong to the book."""
        await self.get_book(db, book_id, user_id)
        if current_chapter_id is not None:
            chapter = await self.get_chapter(db, current_chapter_id, user_id)
            if chapter.book_id != book_id:
                raise NotFoundError(resource="chapter", resource_id=str(current_chapter_id))

        try:
            result = await db.execute(
                select(BookProgress).where(
                    BookProgress.user_id == user_id, BookProgress.book_id == book_id
                )
            )
            progress = result.scalar_one_or_none()
            if progress is None:
                progress = BookProgress(user_id=user_id, book_id=book_id)
                db.add(progress)
            progress.current_chapter_id = current_chapter_id
            progress.last_read_at = utcnow()
            await db.flush()
            return progress
        except SQLAlchemyError as e:
            logger.error("Database error saving progress for book %d: %s", book_id, str(e))
            raise DatabaseError(context={"book_id": book_id})

    # ── Book highlights ───────────────────────────────────────────────────

    async def list_highlights(
        self, db: AsyncSession, user_id: str, chapter_id: Optional[int] = None
    ) -> List[BookHighlight]:
        query = select(BookHighlight).where(BookHighlight.user_id == user_id)
        if chapter_id is not None:
            query = query.where(BookHighlight.chapter_id == chapter_id)
        result = await db.execute(query.order_by(BookHighlight.chapter_id, BookHighlight.start_offset))
        return list(result.scalars().all())

    async def create_highlight(
        self,
        db: AsyncSession,
        user_id: str,
        chapter_id: int,
        start_offset: int,
        end_offset: int,
        color: str = "yellow",
        note: Optional[str] = None,
    ) -> BookHighlight:
        await self.get_chapter(db, chapter_id, user_id)
        highlight = BookHighlight(
            user_id=user_id,
            chapter_id=chapter_id,
            start_offset=start_offset,
            end_offset=end_offset,
            color=color,
            note=note,
        )
        db.add(highlight)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating book highlight: %s", str(e))
            raise DatabaseError(context={"chapter_id": chapter_id})
        return highlight

    async def delete_highlight(self, db: AsyncSession, highlight_id: int, user_id: str) -> int:
        try:
            result = await db.execute(
                delete(BookHighlight).where(
                    BookHighlight.id == highlight_id, BookHighlight.user_id == user_id
                )
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error deleting book highlight %d: %s", highlight_id, str(e))
            raise DatabaseError(context={"highlight_id": highlight_id})

    # ── Daily devotional ──────────────────────────────────────────────────

    async def get_devotional_for_day(
        self, db: AsyncSession, today: Optional[date] = None
    ) -> DailyDevotional:
        day = (today or date.today()).timetuple().tm_yday

        result = await db.execute(select(DailyDevotional).where(DailyDevotional.day_of_year == day))
        devotional = result.scalar_one_or_none()
        if devotional is not None:
            return devotional

        count = (await db.execute(select(func.count(DailyDevotional.id)))).scalar() or 0
        if count == 0:
            raise NotFoundError(resource="daily devotional", resource_id=str(day))

        result = await db.execute(
            select(DailyDevotional)
            .order_by(DailyDevotional.day_of_year)
            .offset((day - 1) % count)
            .limit(1)
        )
        return result.scalar_one()


library_service = LibraryService()
