"""
Selah Backend — Livestream Companion Routes
============================================

What:  CRUD for livestreams, their timestamped notes and detected
       references/hymns, plus the AI transcript annotator.
Who:   The livestream page and app.companion.CompanionClient.

Every route is authenticated. A livestream the caller does not own answers
404 exactly like a missing one; deletes answer {"success": true} whether or
not anything was removed.

Request flow (add a note while watching):
    client reads player time → POST /api/livestreams/{id}/notes
    → ownership check → bibleReference defaults to first reference in content
    → row persisted → client re-fetches GET /api/livestreams/{id}/notes
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.exceptions import CircuitBreakerOpenError, LLMServiceError
from app.models.livestream import Livestream, Transcript
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.livestream import (
    AnnotationResponse,
    DetectedHymnCreate,
    DetectedHymnResponse,
    DetectedVerseCreate,
    DetectedVerseResponse,
    LivestreamCreate,
    LivestreamNoteCreate,
    LivestreamNoteResponse,
    LivestreamResponse,
    PositionUpdate,
    TranscriptCreate,
    TranscriptResponse,
    TranscriptSegmentResponse,
)
from app.services.annotation_service import annotation_service
from app.services.identity_service import AuthenticatedUser
from app.services.livestream_service import livestream_service
from app.services.media import embed_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Livestreams"])

NOT_FOUND = {404: {"description": "Livestream not found", "model": ErrorResponse}}


def _livestream_response(livestream: Livestream) -> LivestreamResponse:
    response = LivestreamResponse.model_validate(livestream)
    response.embed_url = embed_url(livestream.source_url, livestream.source_type)
    return response


def _transcript_response(transcript: Transcript, segments) -> TranscriptResponse:
    return TranscriptResponse(
        id=transcript.id,
        livestream_id=transcript.livestream_id,
        status=transcript.status,
        raw_text=transcript.raw_text,
        error_message=transcript.error_message,
        created_at=transcript.created_at,
        completed_at=transcript.completed_at,
        segments=[TranscriptSegmentResponse.model_validate(s) for s in segments],
    )


# ── Livestreams ───────────────────────────────────────────────────────────


@router.get("/livestreams", response_model=List[LivestreamResponse])
async def list_livestreams(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return [_livestream_response(ls) for ls in await livestream_service.list_livestreams(db, user.id)]


@router.post("/livestreams", response_model=LivestreamResponse, status_code=201)
async def create_livestream(
    body: LivestreamCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    livestream = await livestream_service.create_livestream(
        db,
        user.id,
        title=body.title,
        source_url=body.source_url,
        description=body.description,
        source_type=body.source_type,
    )
    return _livestream_response(livestream)


@router.get("/livestreams/{livestream_id}", response_model=LivestreamResponse, responses=NOT_FOUND)
async def get_livestream(
    livestream_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return _livestream_response(await livestream_service.get_livestream(db, livestream_id, user.id))


@router.delete("/livestreams/{livestream_id}", response_model=SuccessResponse)
async def delete_livestream(
    livestream_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Removes the livestream with all of its notes, detections and transcripts."""
    await livestream_service.delete_livestream(db, livestream_id, user.id)
    return SuccessResponse()


@router.patch(
    "/livestreams/{livestream_id}/position",
    response_model=LivestreamResponse,
    responses=NOT_FOUND,
    summary="Persist the last playback position (called every 30s of playback)",
)
async def update_position(
    livestream_id: int,
    body: PositionUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    livestream = await livestream_service.update_position(db, livestream_id, user.id, body.position)
    return _livestream_response(livestream)


# ── Notes ─────────────────────────────────────────────────────────────────


@router.get(
    "/livestreams/{livestream_id}/notes",
    response_model=List[LivestreamNoteResponse],
    responses=NOT_FOUND,
)
async def list_livestream_notes(
    livestream_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await livestream_service.list_notes(db, livestream_id, user.id)


@router.post(
    "/livestreams/{livestream_id}/notes",
    response_model=LivestreamNoteResponse,
    status_code=201,
    responses=NOT_FOUND,
)
async def create_livestream_note(
    livestream_id: int,
    body: LivestreamNoteCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await livestream_service.create_note(
        db,
        livestream_id,
        user.id,
        content=body.content,
        timestamp_seconds=body.timestamp_seconds,
        bible_reference=body.bible_reference,
    )


@router.delete("/livestream-notes/{note_id}", response_model=SuccessResponse)
async def delete_livestream_note(
    note_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await livestream_service.delete_note(db, note_id, user.id)
    return SuccessResponse()


# ── Detected verses / hymns ───────────────────────────────────────────────


@router.get(
    "/livestreams/{livestream_id}/detected-verses",
    response_model=List[DetectedVerseResponse],
    responses=NOT_FOUND,
)
async def list_detected_verses(
    livestream_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await livestream_service.list_detected_verses(db, livestream_id, user.id)


@router.post(
    "/livestreams/{livestream_id}/detected-verses",
    response_model=DetectedVerseResponse,
    status_code=201,
    responses=NOT_FOUND,
)
async def add_detected_verse(
    livestream_id: int,
    body: DetectedVerseCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await livestream_service.add_detected_verse(
        db, livestream_id, user.id, body.bible_reference, body.timestamp_seconds
    )


@router.get(
    "/livestreams/{livestream_id}/detected-hymns",
    response_model=List[DetectedHymnResponse],
    responses=NOT_FOUND,
)
async def list_detected_hymns(
    livestream_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await livestream_service.list_detected_hymns(db, livestream_id, user.id)


@router.post(
    "/livestreams/{livestream_id}/detected-hymns",
    response_model=DetectedHymnResponse,
    status_code=201,
    responses=NOT_FOUND,
)
async def add_detected_hymn(
    livestream_id: int,
    body: DetectedHymnCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await livestream_service.add_detected_hymn(
        db,
        livestream_id,
        user.id,
        title=body.title,
        hymn_id=body.hymn_id,
        timestamp_seconds=body.timestamp_seconds,
    )


# ── Transcript annotation ─────────────────────────────────────────────────


@router.post(
    "/livestreams/{livestream_id}/transcript",
    response_model=AnnotationResponse,
    status_code=201,
    responses={
        **NOT_FOUND,
        503: {"description": "AI annotator unavailable", "model": ErrorResponse},
    },
    summary="Store a transcript and detect Bible references and hymns in it",
)
async def annotate_transcript(
    livestream_id: int,
    body: TranscriptCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Runs the AI annotator synchronously.

    When the model call fails the transcript is committed with status
    `failed` before the 503 is returned, so GET .../transcript reflects it.
    """
    try:
        result = await annotation_service.annotate(
            db,
            livestream_id,
            user.id,
            raw_text=body.raw_text,
            segments=[(s.start_seconds, s.end_seconds, s.text) for s in body.segments],
        )
    except (LLMServiceError, CircuitBreakerOpenError):
        await db.commit()
        raise

    return AnnotationResponse(
        transcript=_transcript_response(result.transcript, result.segments),
        detected_verses=[DetectedVerseResponse.model_validate(v) for v in result.detected_verses],
        detected_hymns=[DetectedHymnResponse.model_validate(h) for h in result.detected_hymns],
    )


@router.get(
    "/livestreams/{livestream_id}/transcript",
    response_model=TranscriptResponse,
    responses={404: {"description": "Livestream or transcript not found", "model": ErrorResponse}},
)
async def get_transcript(
    livestream_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    transcript, segments = await annotation_service.get_latest_transcript(db, livestream_id, user.id)
    return _transcript_response(transcript, segments)
