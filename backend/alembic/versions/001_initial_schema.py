"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates every table: Bible content and per-user verse data, the
       hymnal and playlists, livestreams with notes/detections/transcripts,
       the devotional library and user preferences.

User ids are opaque identity-provider strings; there is no users table,
so `user_id` columns carry an index but no foreign key.

Rollback: downgrade() drops everything in reverse dependency order.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def _user_id() -> sa.Column:
    return sa.Column("user_id", sa.String(64), nullable=False)


def upgrade() -> None:
    # ── Bible ─────────────────────────────────────────────────────────────
    op.create_table(
        "bible_verses",
        _id(),
        sa.Column("book", sa.String(50), nullable=False),
        sa.Column("chapter", sa.Integer(), nullable=False),
        sa.Column("verse", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("translation", sa.String(20), nullable=False, server_default="KJV"),
    )
    op.create_index(
        "idx_bible_verses_lookup",
        "bible_verses",
        ["translation", "book", "chapter", "verse"],
    )

    op.create_table(
        "highlights",
        _id(),
        _user_id(),
        sa.Column(
            "verse_id",
            sa.Integer(),
            sa.ForeignKey("bible_verses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("color", sa.String(20), nullable=False, server_default="yellow"),
        sa.Column("note", sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("user_id", "verse_id", name="uq_highlights_user_verse"),
    )
    op.create_index("ix_highlights_user_id", "highlights", ["user_id"])

    op.create_table(
        "saved_verses",
        _id(),
        _user_id(),
        sa.Column(
            "verse_id",
            sa.Integer(),
            sa.ForeignKey("bible_verses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("user_id", "verse_id", name="uq_saved_verses_user_verse"),
    )
    op.create_index("ix_saved_verses_user_id", "saved_verses", ["user_id"])

    op.create_table(
        "notes",
        _id(),
        _user_id(),
        sa.Column(
            "verse_id",
            sa.Integer(),
            sa.ForeignKey("bible_verses.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_notes_user_id", "notes", ["user_id"])

    # ── Hymnal ────────────────────────────────────────────────────────────
    op.create_table(
        "hymns",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("lyrics", sa.Text(), nullable=False),
        sa.Column("composer", sa.String(255), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("tune", sa.String(100), nullable=True),
        sa.Column("meter", sa.String(50), nullable=True),
    )
    op.create_index("ix_hymns_title", "hymns", ["title"])

    op.create_table(
        "saved_hymns",
        _id(),
        _user_id(),
        sa.Column(
            "hymn_id",
            sa.Integer(),
            sa.ForeignKey("hymns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("user_id", "hymn_id", name="uq_saved_hymns_user_hymn"),
    )
    op.create_index("ix_saved_hymns_user_id", "saved_hymns", ["user_id"])

    op.create_table(
        "playlists",
        _id(),
        _user_id(),
        sa.Column("title", sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index("ix_playlists_user_id", "playlists", ["user_id"])

    op.create_table(
        "playlist_items",
        _id(),
        sa.Column(
            "playlist_id",
            sa.Integer(),
            sa.ForeignKey("playlists.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "hymn_id",
            sa.Integer(),
            sa.ForeignKey("hymns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order_index", sa.Integer(), nullable=False),
    )
    op.create_index("ix_playlist_items_playlist_id", "playlist_items", ["playlist_id"])

    # ── Livestreams ───────────────────────────────────────────────────────
    op.create_table(
        "livestreams",
        _id(),
        _user_id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=False),
        sa.Column("source_type", sa.String(20), nullable=False),
        sa.Column(
            "last_view_position",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Last persisted playback position in whole seconds",
        ),
        _created_at(),
    )
    op.create_index("ix_livestreams_user_id", "livestreams", ["user_id"])

    op.create_table(
        "livestream_notes",
        _id(),
        _user_id(),
        sa.Column(
            "livestream_id",
            sa.Integer(),
            sa.ForeignKey("livestreams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("timestamp_seconds", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("bible_reference", sa.String(100), nullable=True),
        _created_at(),
    )
    op.create_index("ix_livestream_notes_user_id", "livestream_notes", ["user_id"])
    op.create_index(
        "idx_livestream_notes_stream_ts",
        "livestream_notes",
        ["livestream_id", "timestamp_seconds"],
    )

    op.create_table(
        "detected_verses",
        _id(),
        sa.Column(
            "livestream_id",
            sa.Integer(),
            sa.ForeignKey("livestreams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("bible_reference", sa.String(100), nullable=False),
        sa.Column("timestamp_seconds", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_detected_verses_livestream_id", "detected_verses", ["livestream_id"])

    op.create_table(
        "detected_hymns",
        _id(),
        sa.Column(
            "livestream_id",
            sa.Integer(),
            sa.ForeignKey("livestreams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "hymn_id",
            sa.Integer(),
            sa.ForeignKey("hymns.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("timestamp_seconds", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_detected_hymns_livestream_id", "detected_hymns", ["livestream_id"])

    op.create_table(
        "transcripts",
        _id(),
        sa.Column(
            "livestream_id",
            sa.Integer(),
            sa.ForeignKey("livestreams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("raw_text", sa.Text(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        _created_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_transcripts_livestream_id", "transcripts", ["livestream_id"])

    op.create_table(
        "transcript_segments",
        _id(),
        sa.Column(
            "transcript_id",
            sa.Integer(),
            sa.ForeignKey("transcripts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_seconds", sa.Integer(), nullable=False),
        sa.Column("end_seconds", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
    )
    op.create_index(
        "ix_transcript_segments_transcript_id", "transcript_segments", ["transcript_id"]
    )

    # ── Devotional library ────────────────────────────────────────────────
    op.create_table(
        "devotional_books",
        _id(),
        sa.Column("owner_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("author", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_color", sa.String(20), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("source", sa.String(50), nullable=True),
        sa.Column("source_id", sa.String(50), nullable=True),
        _created_at(),
    )
    op.create_index("ix_devotional_books_owner_id", "devotional_books", ["owner_id"])

    op.create_table(
        "devotional_chapters",
        _id(),
        sa.Column(
            "book_id",
            sa.Integer(),
            sa.ForeignKey("devotional_books.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
    )
    op.create_index("ix_devotional_chapters_book_id", "devotional_chapters", ["book_id"])

    op.create_table(
        "book_progress",
        _id(),
        _user_id(),
        sa.Column(
            "book_id",
            sa.Integer(),
            sa.ForeignKey("devotional_books.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "current_chapter_id",
            sa.Integer(),
            sa.ForeignKey("devotional_chapters.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("last_read_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "book_id", name="uq_book_progress_user_book"),
    )
    op.create_index("ix_book_progress_user_id", "book_progress", ["user_id"])

    op.create_table(
        "book_highlights",
        _id(),
        _user_id(),
        sa.Column(
            "chapter_id",
            sa.Integer(),
            sa.ForeignKey("devotional_chapters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_offset", sa.Integer(), nullable=False),
        sa.Column("end_offset", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_book_highlights_user_id", "book_highlights", ["user_id"])

    op.create_table(
        "daily_devotionals",
        _id(),
        sa.Column("day_of_year", sa.Integer(), nullable=False, unique=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("scripture_reference", sa.String(100), nullable=False),
        sa.Column("scripture_text", sa.Text(), nullable=False),
        sa.Column("reflection", sa.Text(), nullable=False),
        sa.Column("prayer", sa.Text(), nullable=False),
        sa.Column("author", sa.String(255), nullable=True),
    )

    op.create_table(
        "user_preferences",
        _id(),
        sa.Column("user_id", sa.String(64), nullable=False, unique=True),
        sa.Column("preferred_translation", sa.String(20), nullable=False),
        sa.Column("theme_mode", sa.String(10), nullable=False),
        sa.Column("font_size", sa.String(10), nullable=False),
    )


def downgrade() -> None:
    for table in (
        "user_preferences",
        "daily_devotionals",
        "book_highlights",
        "book_progress",
        "devotional_chapters",
        "devotional_books",
        "transcript_segments",
        "transcripts",
        "detected_hymns",
        "detected_verses",
        "livestream_notes",
        "livestreams",
        "playlist_items",
        "playlists",
        "saved_hymns",
        "hymns",
        "notes",
        "saved_verses",
        "highlights",
        "bible_verses",
    ):
        # Indexes go with their table
        op.drop_table(table)
