"""
Selah Backend — Bible & Study SQLAlchemy Models
================================================

What:  ORM models for scripture text and the per-user study artefacts attached to it.
Tables:
    - bible_verses:  one row per (translation, book, chapter, verse)
    - highlights:    color tag on a verse, at most one per (user, verse)
    - saved_verses:  bookmark on a verse, at most one per (user, verse)
    - notes:         free-text study note, optionally tied to a verse

User IDs are opaque strings issued by the identity provider; there is no
local users table, so they are never foreign keys.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models._columns import created_at_column, id_column


class BibleVerse(Base):
    """A single verse of a single translation. Read-only after seeding."""

    __tablename__ = "bible_verses"

    id: Mapped[int] = id_column()
    book: Mapped[str] = mapped_column(String(50), nullable=False)
    chapter: Mapped[int] = mapped_column(Integer, nullable=False)
    verse: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    translation: Mapped[str] = mapped_column(
        String(20), nullable=False, default="KJV", server_default="KJV"
    )

    # Chapter reads (translation, book, chapter ORDER BY verse) are the hot path
    __table_args__ = (
        Index("idx_bible_verses_lookup", "translation", "book", "chapter", "verse"),
    )

    @property
    def reference(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"

    def __repr__(self) -> str:
        return f"<BibleVerse({self.translation} {self.reference})>"


class Highlight(Base):
    """
    Color tag on a verse.

    Saving a highlight for a verse that is already highlighted updates the
    color in place (last color wins); the unique constraint backs that up.
    """

    __tablename__ = "highlights"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    verse_id: Mapped[int] = mapped_column(
        ForeignKey("bible_verses.id", ondelete="CASCADE"), nullable=False
    )
    color: Mapped[str] = mapped_column(
        String(20), nullable=False, default="yellow", server_default="yellow"
    )
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = created_at_column()

    __table_args__ = (
        UniqueConstraint("user_id", "verse_id", name="uq_highlights_user_verse"),
    )


class SavedVerse(Base):
    __tablename__ = "saved_verses"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    verse_id: Mapped[int] = mapped_column(
        ForeignKey("bible_verses.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = created_at_column()

    __table_args__ = (
        UniqueConstraint("user_id", "verse_id", name="uq_saved_verses_user_verse"),
    )


class StudyNote(Base):
    """Personal study note; `verse_id` is optional (general notes are allowed)."""

    __tablename__ = "notes"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    verse_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("bible_verses.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = created_at_column()
