"""
Selah Backend — Devotional Library SQLAlchemy Models
=====================================================

Tables:
    - devotional_books:    seeded public books (owner_id NULL) and private
                           imports from the public book catalog (owner_id set)
    - devotional_chapters: ordered chapters of a book
    - book_progress:       last chapter read, one row per (user, book)
    - book_highlights:     character-offset highlights inside a chapter
    - daily_devotionals:   one reading per day of the year
    - user_preferences:    reading preferences, one row per user
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models._columns import created_at_column, id_column, utcnow


class DevotionalBook(Base):
    __tablename__ = "devotional_books"

    id: Mapped[int] = id_column()
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_color: Mapped[str] = mapped_column(String(20), nullable=False, default="#2c4a6e")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Provenance for catalog imports, e.g. source="gutenberg", source_id="1342"
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    source_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = created_at_column()


class DevotionalChapter(Base):
    __tablename__ = "devotional_chapters"

    id: Mapped[int] = id_column()
    book_id: Mapped[int] = mapped_column(
        ForeignKey("devotional_books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class BookProgress(Base):
    __tablename__ = "book_progress"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    book_id: Mapped[int] = mapped_column(
        ForeignKey("devotional_books.id", ondelete="CASCADE"), nullable=False
    )
    current_chapter_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("devotional_chapters.id", ondelete="SET NULL"), nullable=True
    )
    last_read_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_book_progress_user_book"),
    )


class BookHighlight(Base):
    __tablename__ = "book_highlights"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("devotional_chapters.id", ondelete="CASCADE"), nullable=False
    )
    start_offset: Mapped[int] = mapped_column(Integer, nullable=False)
    end_offset: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="yellow")
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = created_at_column()


class DailyDevotional(Base):
    __tablename__ = "daily_devotionals"

    id: Mapped[int] = id_column()
    day_of_year: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    scripture_reference: Mapped[str] = mapped_column(String(100), nullable=False)
    scripture_text: Mapped[str] = mapped_column(Text, nullable=False)
    reflection: Mapped[str] = mapped_column(Text, nullable=False)
    prayer: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    preferred_translation: Mapped[str] = mapped_column(String(20), nullable=False, default="KJV")
    theme_mode: Mapped[str] = mapped_column(String(10), nullable=False, default="light")
    font_size: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
