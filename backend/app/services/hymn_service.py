"""
Selah Backend — Hymnal Service
===============================

What:  Hymn browsing, title matching, saved hymns and playlists.
Who:   Called by routes/hymns.py, by LivestreamService (detected hymns) and
       by AnnotationService (AI-detected hymn titles).

Title matching:
    find_by_title() is a case-insensitive substring match (ILIKE %title%)
    against hymns.title. With several candidates the lowest id wins, so the
    result is stable across calls. No match returns None; the caller keeps
    the free-text title.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.hymn import Hymn, Playlist, PlaylistItem, SavedHymn
from app.schemas.hymn import (
    HymnResponse,
    PlaylistDetailResponse,
    SavedHymnWithHymnResponse,
)

logger = logging.getLogger(__name__)


class HymnService:

    # ── Hymnal ────────────────────────────────────────────────────────────

    async def list_hymns(
        self, db: AsyncSession, q: Optional[str] = None, tag: Optional[str] = None
    ) -> List[Hymn]:
        """
        Hymns ordered by title.

        `q` matches title or composer (case-insensitive substring). `tag` is an
        exact, case-insensitive tag match; tags live in a JSON column, so that
        filter is applied after the query.
        """
        query = select(Hymn).order_by(Hymn.title, Hymn.id)
        if q and q.strip():
            needle = f"%{q.strip()}%"
            query = query.where(or_(Hymn.title.ilike(needle), Hymn.composer.ilike(needle)))
        try:
            result = await db.execute(query)
            hymns = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing hymns: %s", str(e))
            raise DatabaseError()

        if tag:
            wanted = tag.strip().lower()
            hymns = [h for h in hymns if any(t.lower() == wanted for t in (h.tags or []))]
        return hymns

    async def list_tags(self, db: AsyncSession) -> List[str]:
        try:
            result = await db.execute(select(Hymn.tags))
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing hymn tags: %s", str(e))
            raise DatabaseError()
        return sorted({t for tags in rows for t in (tags or [])})

    async def get_hymn(self, db: AsyncSession, hymn_id: int) -> Hymn:
        try:
            hymn = await db.get(Hymn, hymn_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching hymn %d: %s", hymn_id, str(e))
            raise DatabaseError(context={"hymn_id": hymn_id})
        if hymn is None:
            raise NotFoundError(resource="hymn", resource_id=str(hymn_id))
        return hymn

    async def find_by_title(self, db: AsyncSession, title: str) -> Optional[Hymn]:
        needle = title.strip()
        if not needle:
            return None
        result = await db.execute(
            select(Hymn).where(Hymn.title.ilike(f"%{needle}%")).order_by(Hymn.id).limit(1)
        )
        return result.scalar_one_or_none()

    # ── Saved hymns ───────────────────────────────────────────────────────

    async def list_saved(self, db: AsyncSession, user_id: str) -> List[SavedHymn]:
        result = await db.execute(
            select(SavedHymn).where(SavedHymn.user_id == user_id).order_by(SavedHymn.id)
        )
        return list(result.scalars().all())

    async def list_saved_with_hymns(
        self, db: AsyncSession, user_id: str
    ) -> List[SavedHymnWithHymnResponse]:
        try:
            result = await db.execute(
                select(SavedHymn, Hymn)
                .join(Hymn, SavedHymn.hymn_id == Hymn.id)
                .where(SavedHymn.user_id == user_id)
                .order_by(SavedHymn.id)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing saved hymns: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})

        return [
            SavedHymnWithHymnResponse(
                id=s.id,
                user_id=s.user_id,
                hymn_id=s.hymn_id,
                created_at=s.created_at,
                hymn=HymnResponse.model_validate(h),
            )
            for s, h in rows
        ]

    async def save_hymn(self, db: AsyncSession, user_id: str, hymn_id: int) -> SavedHymn:
        """Idempotent: saving an already-saved hymn returns the existing row."""
        await self.get_hymn(db, hymn_id)
        try:
            result = await db.execute(
                select(SavedHymn).where(SavedHymn.user_id == user_id, SavedHymn.hymn_id == hymn_id)
            )
            existing = result.scalar_one_or_none()
            if existing is not None:
                return existing
            saved = SavedHymn(user_id=user_id, hymn_id=hymn_id)
            db.add(saved)
            await db.flush()
            return saved
        except SQLAlchemyError as e:
            logger.error("Database error saving hymn %d: %s", hymn_id, str(e))
            raise DatabaseError(context={"hymn_id": hymn_id})

    async def unsave_hymn(self, db: AsyncSession, hymn_id: int, user_id: str) -> int:
        """Keyed by hymn id, not saved-row id."""
        try:
            result = await db.execute(
                delete(SavedHymn).where(SavedHymn.hymn_id == hymn_id, SavedHymn.user_id == user_id)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error removing saved hymn %d: %s", hymn_id, str(e))
            raise DatabaseError(context={"hymn_id": hymn_id})

    # ── Playlists ─────────────────────────────────────────────────────────

    async def list_playlists(self, db: AsyncSession, user_id: str) -> List[Playlist]:
        result = await db.execute(
            select(Playlist).where(Playlist.user_id == user_id).order_by(Playlist.id)
        )
        return list(result.scalars().all())

    async def create_playlist(self, db: AsyncSession, user_id: str, title: str) -> Playlist:
        playlist = Playlist(user_id=user_id, title=title.strip())
        db.add(playlist)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating playlist: %s", str(e))
            raise DatabaseError()
        return playlist

    async def _owned_playlist(self, db: AsyncSession, playlist_id: int, user_id: str) -> Playlist:
        result = await db.execute(
            select(Playlist).where(Playlist.id == playlist_id, Playlist.user_id == user_id)
        )
        playlist = result.scalar_one_or_none()
        if playlist is None:
            raise NotFoundError(resource="playlist", resource_id=str(playlist_id))
        return playlist

    async def get_playlist(
        self, db: AsyncSession, playlist_id: int, user_id: str
    ) -> PlaylistDetailResponse:
        playlist = await self._owned_playlist(db, playlist_id, user_id)
        result = await db.execute(
            select(Hymn)
            .join(PlaylistItem, PlaylistItem.hymn_id == Hymn.id)
            .where(PlaylistItem.playlist_id == playlist.id)
            .order_by(PlaylistItem.order_index, PlaylistItem.id)
        )
        return PlaylistDetailResponse(
            id=playlist.id,
            user_id=playlist.user_id,
            title=playlist.title,
            created_at=playlist.created_at,
            hymns=[HymnResponse.model_validate(h) for h in result.scalars().all()],
        )

    async def add_hymn_to_playlist(
        self,
        db: AsyncSession,
        playlist_id: int,
        user_id: str,
        hymn_id: int,
        order_index: Optional[int] = None,
    ) -> PlaylistItem:
        """Append (or insert at `order_index`) a hymn; the same hymn may appear twice."""
        await self._owned_playlist(db, playlist_id, user_id)
        await self.get_hymn(db, hymn_id)

        if order_index is None:
            result = await db.execute(
                select(func.max(PlaylistItem.order_index)).where(
                    PlaylistItem.playlist_id == playlist_id
                )
            )
            highest = result.scalar()
            order_index = 0 if highest is None else highest + 1

        item = PlaylistItem(playlist_id=playlist_id, hymn_id=hymn_id, order_index=order_index)
        db.add(item)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error adding hymn %d to playlist %d: %s", hymn_id, playlist_id, str(e))
            raise DatabaseError(context={"playlist_id": playlist_id})
        return item

    async def delete_playlist(self, db: AsyncSession, playlist_id: int, user_id: str) -> int:
        try:
            owned = await db.execute(
                select(Playlist.id).where(Playlist.id == playlist_id, Playlist.user_id == user_id)
            )
            if owned.scalar_one_or_none() is None:
                return 0
            await db.execute(delete(PlaylistItem).where(PlaylistItem.playlist_id == playlist_id))
            result = await db.execute(delete(Playlist).where(Playlist.id == playlist_id))
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error deleting playlist %d: %s", playlist_id, str(e))
            raise DatabaseError(context={"playlist_id": playlist_id})


hymn_service = HymnService()
