"""
Selah Backend — Study Note Service
===================================

What:  Personal study notes, optionally attached to a verse.
Who:   Called by routes/notes.py (GET/POST/DELETE /api/notes).

Design Decision:
    NoteService is stateless; it receives the db session for each call, so
    each request gets its own transaction and tests can pass an in-memory
    session directly.

Listing:
    Newest first. The attached verse (if any) is resolved in one extra query
    for the whole page rather than one query per note.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.bible import StudyNote
from app.schemas.bible import StudyNoteResponse, VerseResponse
from app.services.bible_service import bible_service

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic for study notes.

    Error Handling Strategy:
        SQLAlchemy failures are wrapped in DatabaseError (generic 500 to the
        client). A missing verse on create propagates NotFoundError (404).
    """

    def _to_response(self, note: StudyNote, verse=None) -> StudyNoteResponse:
        return StudyNoteResponse(
            id=note.id,
            user_id=note.user_id,
            verse_id=note.verse_id,
            content=note.content,
            created_at=note.created_at,
            verse=VerseResponse.model_validate(verse) if verse is not None else None,
        )

    async def list_notes(self, db: AsyncSession, user_id: str) -> List[StudyNoteResponse]:
        """
        All of the caller's notes, newest first, each with its verse attached.

        Query plan:
            SELECT * FROM notes WHERE user_id = :uid ORDER BY created_at DESC, id DESC
            SELECT * FROM bible_verses WHERE id IN (:verse_ids)
        """
        try:
            result = await db.execute(
                select(StudyNote)
                .where(StudyNote.user_id == user_id)
                .order_by(desc(StudyNote.created_at), desc(StudyNote.id))
            )
            notes = list(result.scalars().all())
            verses = await bible_service.get_verses_by_ids(
                db, [n.verse_id for n in notes if n.verse_id is not None]
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [self._to_response(n, verses.get(n.verse_id)) for n in notes]

    async def create_note(
        self,
        db: AsyncSession,
        user_id: str,
        content: str,
        verse_id: Optional[int] = None,
    ) -> StudyNoteResponse:
        verse = None
        if verse_id is not None:
            # Raises NotFoundError (→ 404) for an unknown verse
            verse = await bible_service.get_verse(db, verse_id)

        try:
            note = StudyNote(user_id=user_id, content=content, verse_id=verse_id)
            db.add(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e))
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"verse_id": verse_id},
            )

        logger.info("Study note %d created (verse=%s)", note.id, verse_id)
        return self._to_response(note, verse)

    async def delete_note(self, db: AsyncSession, note_id: int, user_id: str) -> int:
        try:
            result = await db.execute(
                delete(StudyNote).where(StudyNote.id == note_id, StudyNote.user_id == user_id)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %d: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": note_id})


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
