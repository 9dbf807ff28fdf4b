"""
Selah Backend — Hymnal SQLAlchemy Models
=========================================

Tables:
    - hymns:          the hymnal itself (seeded, read-only from the API)
    - saved_hymns:    per-user favourites, at most one per (user, hymn)
    - playlists:      user-owned ordered collections of hymns
    - playlist_items: (playlist, hymn, order_index)

`hymns.tags` is stored as JSON rather than a PostgreSQL ARRAY so the same
model runs on the SQLite test database.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models._columns import created_at_column, id_column


class Hymn(Base):
    __tablename__ = "hymns"

    id: Mapped[int] = id_column()
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    lyrics: Mapped[str] = mapped_column(Text, nullable=False)
    composer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    tune: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    meter: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Hymn(id={self.id}, title='{self.title}')>"


class SavedHymn(Base):
    __tablename__ = "saved_hymns"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    hymn_id: Mapped[int] = mapped_column(
        ForeignKey("hymns.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = created_at_column()

    __table_args__ = (
        UniqueConstraint("user_id", "hymn_id", name="uq_saved_hymns_user_hymn"),
    )


class Playlist(Base):
    __tablename__ = "playlists"

    id: Mapped[int] = id_column()
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = created_at_column()


class PlaylistItem(Base):
    __tablename__ = "playlist_items"

    id: Mapped[int] = id_column()
    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hymn_id: Mapped[int] = mapped_column(
        ForeignKey("hymns.id", ondelete="CASCADE"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
