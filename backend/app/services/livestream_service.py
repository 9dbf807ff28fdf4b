"""
Selah Backend — Livestream Companion Service
=============================================

What:  Ownership-scoped persistence for livestreams and everything hung off
       them: timestamped notes, detected verses, detected hymns, transcripts.
Who:   Called by routes/livestreams.py and by AnnotationService.

Ownership model:
    Every public method takes the caller's user_id.
        - Reads / creates under a livestream the caller doesn't own → NotFoundError
          (indistinguishable from a livestream that doesn't exist)
        - Deletes that match nothing → return 0, never raise

Cascade:
    delete_livestream() removes transcript segments, transcripts, notes,
    detected verses and detected hymns before the livestream row itself, in
    the same transaction. The FKs also declare ON DELETE CASCADE, but SQLite
    ignores that unless foreign_keys is enabled, so the explicit deletes are
    what guarantee "no orphaned child rows" everywhere.

Ordering:
    Notes and detected rows are listed by (timestamp_seconds, id).
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.livestream import (
    DetectedHymn,
    DetectedVerse,
    Livestream,
    LivestreamNote,
    Transcript,
    TranscriptSegment,
)
from app.services.hymn_service import hymn_service
from app.services.media import detect_source_type
from app.services.reference_extractor import first_reference

logger = logging.getLogger(__name__)


class LivestreamService:

    # ── Livestreams ───────────────────────────────────────────────────────

    async def list_livestreams(self, db: AsyncSession, user_id: str) -> List[Livestream]:
        try:
            result = await db.execute(
                select(Livestream)
                .where(Livestream.user_id == user_id)
                .order_by(Livestream.created_at.desc(), Livestream.id.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing livestreams: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def get_livestream(self, db: AsyncSession, livestream_id: int, user_id: str) -> Livestream:
        """
        Fetch a livestream owned by `user_id`.

        Raises:
            NotFoundError: Missing, or owned by another user (→ 404 either way)
        """
        try:
            result = await db.execute(
                select(Livestream).where(
                    Livestream.id == livestream_id,
                    Livestream.user_id == user_id,
                )
            )
            livestream = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching livestream %d: %s", livestream_id, str(e))
            raise DatabaseError(context={"livestream_id": livestream_id})

        if livestream is None:
            raise NotFoundError(resource="livestream", resource_id=str(livestream_id))
        return livestream

    async def create_livestream(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        source_url: str,
        description: Optional[str] = None,
        source_type: Optional[str] = None,
    ) -> Livestream:
        livestream = Livestream(
            user_id=user_id,
            title=title.strip(),
            description=description,
            source_url=source_url.strip(),
            source_type=source_type or detect_source_type(source_url.strip()),
            last_view_position=0,
        )
        db.add(livestream)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating livestream: %s", str(e))
            raise DatabaseError()
        logger.info("Livestream %d created (source_type=%s)", livestream.id, livestream.source_type)
        return livestream

    async def update_position(
        self, db: AsyncSession, livestream_id: int, user_id: str, position: int
    ) -> Livestream:
        """Overwrite last_view_position (last write wins)."""
        livestream = await self.get_livestream(db, livestream_id, user_id)
        livestream.last_view_position = position
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating position of %d: %s", livestream_id, str(e))
            raise DatabaseError(context={"livestream_id": livestream_id})
        logger.debug("Livestream %d position → %ds", livestream_id, position)
        return livestream

    async def delete_livestream(self, db: AsyncSession, livestream_id: int, user_id: str) -> int:
        """
        Delete a livestream and all of its child rows.

        Returns:
            1 when the livestream was removed, 0 when nothing matched (id, user_id).
        """
        try:
            owned = await db.execute(
                select(Livestream.id).where(
                    Livestream.id == livestream_id,
                    Livestream.user_id == user_id,
                )
            )
            if owned.scalar_one_or_none() is None:
                return 0

            transcript_ids = select(Transcript.id).where(Transcript.livestream_id == livestream_id)
            await db.execute(
                delete(TranscriptSegment).where(TranscriptSegment.transcript_id.in_(transcript_ids))
            )
            await db.execute(delete(Transcript).where(Transcript.livestream_id == livestream_id))
            await db.execute(delete(LivestreamNote).where(LivestreamNote.livestream_id == livestream_id))
            await db.execute(delete(DetectedVerse).where(DetectedVerse.livestream_id == livestream_id))
            await db.execute(delete(DetectedHymn).where(DetectedHymn.livestream_id == livestream_id))
            result = await db.execute(delete(Livestream).where(Livestream.id == livestream_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting livestream %d: %s", livestream_id, str(e))
            raise DatabaseError(context={"livestream_id": livestream_id})

        logger.info("Livestream %d deleted with its notes and detections", livestream_id)
        return result.rowcount or 0

    # ── Notes ─────────────────────────────────────────────────────────────

    async def list_notes(
        self, db: AsyncSession, livestream_id: int, user_id: str
    ) -> List[LivestreamNote]:
        await self.get_livestream(db, livestream_id, user_id)
        result = await db.execute(
            select(LivestreamNote)
            .where(
                LivestreamNote.livestream_id == livestream_id,
                LivestreamNote.user_id == user_id,
            )
            .order_by(LivestreamNote.timestamp_seconds, LivestreamNote.id)
        )
        return list(result.scalars().all())

    async def create_note(
        self,
        db: AsyncSession,
        livestream_id: int,
        user_id: str,
        content: str,
        timestamp_seconds: int = 0,
        bible_reference: Optional[str] = None,
    ) -> LivestreamNote:
        """
        Pin a note to a playback second.

        If `bible_reference` is not supplied, the first reference found in
        `content` is attached (or none, when the text contains no reference).
        """
        await self.get_livestream(db, livestream_id, user_id)

        reference = bible_reference.strip() if bible_reference else None
        if not reference:
            reference = first_reference(content)

        note = LivestreamNote(
            user_id=user_id,
            livestream_id=livestream_id,
            timestamp_seconds=timestamp_seconds,
            content=content,
            bible_reference=reference,
        )
        db.add(note)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating livestream note: %s", str(e))
            raise DatabaseError(context={"livestream_id": livestream_id})
        return note

    async def delete_note(self, db: AsyncSession, note_id: int, user_id: str) -> int:
        try:
            result = await db.execute(
                delete(LivestreamNote).where(
                    LivestreamNote.id == note_id,
                    LivestreamNote.user_id == user_id,
                )
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error deleting livestream note %d: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": note_id})

    # ── Detected verses / hymns ───────────────────────────────────────────

    async def list_detected_verses(
        self, db: AsyncSession, livestream_id: int, user_id: str
    ) -> List[DetectedVerse]:
        await self.get_livestream(db, livestream_id, user_id)
        result = await db.execute(
            select(DetectedVerse)
            .where(DetectedVerse.livestream_id == livestream_id)
            .order_by(DetectedVerse.timestamp_seconds, DetectedVerse.id)
        )
        return list(result.scalars().all())

    async def list_detected_hymns(
        self, db: AsyncSession, livestream_id: int, user_id: str
    ) -> List[DetectedHymn]:
        await self.get_livestream(db, livestream_id, user_id)
        result = await db.execute(
            select(DetectedHymn)
            .where(DetectedHymn.livestream_id == livestream_id)
            .order_by(DetectedHymn.timestamp_seconds, DetectedHymn.id)
        )
        return list(result.scalars().all())

    async def add_detected_verse(
        self,
        db: AsyncSession,
        livestream_id: int,
        user_id: str,
        bible_reference: str,
        timestamp_seconds: int = 0,
    ) -> DetectedVerse:
        await self.get_livestream(db, livestream_id, user_id)
        return await self.record_detected_verse(db, livestream_id, bible_reference, timestamp_seconds)

    async def add_detected_hymn(
        self,
        db: AsyncSession,
        livestream_id: int,
        user_id: str,
        title: str,
        hymn_id: Optional[int] = None,
        timestamp_seconds: int = 0,
    ) -> DetectedHymn:
        """
        Record a hymn heard at `timestamp_seconds`.

        An explicit `hymn_id` must exist (404 otherwise). Without one, the
        title is matched against the hymnal; no match leaves hymn_id NULL.
        """
        await self.get_livestream(db, livestream_id, user_id)
        if hymn_id is not None:
            await hymn_service.get_hymn(db, hymn_id)
        return await self.record_detected_hymn(db, livestream_id, title, hymn_id, timestamp_seconds)

    # The record_* helpers skip the ownership check; callers must have done it.

    async def record_detected_verse(
        self, db: AsyncSession, livestream_id: int, bible_reference: str, timestamp_seconds: int = 0
    ) -> DetectedVerse:
        detected = DetectedVerse(
            livestream_id=livestream_id,
            bible_reference=bible_reference.strip(),
            timestamp_seconds=timestamp_seconds,
        )
        db.add(detected)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error recording detected verse: %s", str(e))
            raise DatabaseError(context={"livestream_id": livestream_id})
        return detected

    async def record_detected_hymn(
        self,
        db: AsyncSession,
        livestream_id: int,
        title: str,
        hymn_id: Optional[int] = None,
        timestamp_seconds: int = 0,
    ) -> DetectedHymn:
        title = title.strip()
        if hymn_id is None:
            match = await hymn_service.find_by_title(db, title)
            hymn_id = match.id if match is not None else None
            if match is None:
                logger.debug("No hymnal match for detected title '%s'", title)

        detected = DetectedHymn(
            livestream_id=livestream_id,
            hymn_id=hymn_id,
            title=title,
            timestamp_seconds=timestamp_seconds,
        )
        db.add(detected)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error recording detected hymn: %s", str(e))
            raise DatabaseError(context={"livestream_id": livestream_id})
        return detected


livestream_service = LivestreamService()
