"""
Selah Backend — Livestream Companion SQLAlchemy Models
=======================================================

What:  ORM models for the livestream companion: the stream itself, the notes a
       viewer takes while watching, the Bible references / hymns detected at a
       playback timestamp, and AI transcripts.
Who:   Used by LivestreamService (CRUD with ownership scoping) and
       AnnotationService (transcript → detected references).

Ownership & Cascade:
    - `livestreams.user_id` owns everything below it.
    - Every note / detected row references exactly one livestream.
    - Deleting a livestream removes its notes, detected verses, detected hymns
      and transcripts (FK ON DELETE CASCADE in PostgreSQL; LivestreamService
      also deletes children explicitly so the property holds on any backend).

Timestamps:
    `timestamp_seconds` is whatever the client says the playback position was.
    No ordering or upper bound is enforced; AI-detected rows use 0 because the
    annotator does not align references to transcript positions.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models._columns import created_at_column, id_column

# Playback sources the companion knows how to embed
SOURCE_TYPES = ("youtube", "vimeo", "mp4", "hls")

# Transcript.status state machine: pending → completed | failed (terminal)
TRANSCRIPT_PENDING = "pending"
TRANSCRIPT_COMPLETED = "completed"
TRANSCRIPT_FAILED = "failed"


class Livestream(Base):
    """
    A user-saved video (live or recorded) that notes are taken against.

    Lifecycle:
        1. Created by the user with a title + URL
        2. `last_view_position` is overwritten every ~30s while watching
           (last write wins; no concurrency token)
        3. Deleted by the owner, cascading to every child row
    """

    __tablename__ = "livestreams"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    source_type: Mapped[str] = mapped_column(String(20), nullable=False, default="youtube")
    last_view_position: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
        comment="Last persisted playback position in whole seconds",
    )
    created_at: Mapped[datetime] = created_at_column()

    def __repr__(self) -> str:
        return f"<Livestream(id={self.id}, title='{self.title}', source_type='{self.source_type}')>"


class LivestreamNote(Base):
    """Viewer note pinned to a playback second. Immutable except for deletion."""

    __tablename__ = "livestream_notes"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id", ondelete="CASCADE"), nullable=False
    )
    timestamp_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    bible_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = created_at_column()

    __table_args__ = (
        Index("idx_livestream_notes_stream_ts", "livestream_id", "timestamp_seconds"),
    )


class DetectedVerse(Base):
    __tablename__ = "detected_verses"

    id: Mapped[int] = id_column()
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bible_reference: Mapped[str] = mapped_column(String(100), nullable=False)
    timestamp_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = created_at_column()


class DetectedHymn(Base):
    """
    Hymn heard at a timestamp. `hymn_id` is NULL when the title did not match
    anything in the hymnal; the free-text `title` is always kept.
    """

    __tablename__ = "detected_hymns"

    id: Mapped[int] = id_column()
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hymn_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("hymns.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = created_at_column()


class Transcript(Base):
    __tablename__ = "transcripts"

    id: Mapped[int] = id_column()
    livestream_id: Mapped[int] = mapped_column(
        ForeignKey("livestreams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TRANSCRIPT_PENDING, server_default=TRANSCRIPT_PENDING
    )
    raw_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = created_at_column()
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class TranscriptSegment(Base):
    __tablename__ = "transcript_segments"

    id: Mapped[int] = id_column()
    transcript_id: Mapped[int] = mapped_column(
        ForeignKey("transcripts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    end_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
