"""
Selah Backend — Study Notes Route Handlers
===========================================

What:  GET/POST /api/notes and DELETE /api/notes/{id}.
Who:   The notes page and the Bible reader's "add note" action.

Caching:
    Responses are per-user, so they carry `Cache-Control: private, no-store`.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.schemas.bible import StudyNoteCreate, StudyNoteResponse
from app.schemas.common import ErrorResponse, SuccessResponse
from app.services.identity_service import AuthenticatedUser
from app.services.note_service import note_service

router = APIRouter(prefix="/api", tags=["Notes"])


@router.get(
    "/notes",
    response_model=List[StudyNoteResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List the caller's study notes, newest first",
)
async def list_notes(
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[StudyNoteResponse]:
    notes = await note_service.list_notes(db, user.id)
    response.headers["Cache-Control"] = "private, no-store"
    response.headers["X-Total-Count"] = str(len(notes))
    return notes


@router.post(
    "/notes",
    response_model=StudyNoteResponse,
    status_code=201,
    responses={404: {"description": "Verse not found", "model": ErrorResponse}},
    summary="Create a study note, optionally attached to a verse",
)
async def create_note(
    body: StudyNoteCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> StudyNoteResponse:
    return await note_service.create_note(db, user.id, content=body.content, verse_id=body.verse_id)


@router.delete("/notes/{note_id}", response_model=SuccessResponse)
async def delete_note(
    note_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await note_service.delete_note(db, note_id, user.id)
    return SuccessResponse()
