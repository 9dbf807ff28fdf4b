"""
Selah Backend — Livestream Companion Schemas
=============================================

What:  API contracts for livestreams, timestamped notes, detected
       references/hymns and AI transcripts.
Who:   Used by routes/livestreams.py; the companion client
       (app.companion.client) posts the same shapes.

Timestamps:
    `timestampSeconds` is a client-supplied playback position. Only
    non-negativity is validated; there is no ordering or upper bound.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


class LivestreamCreate(CamelModel):
    """
    Body of POST /api/livestreams.

    `source_type` is inferred from the URL when omitted
    (see app.services.media.detect_source_type).
    """

    title: str = Field(min_length=1, max_length=255)
    source_url: str = Field(min_length=1, max_length=2048)
    description: Optional[str] = Field(default=None, max_length=5000)
    source_type: Optional[str] = Field(default=None)

    @field_validator("source_type")
    @classmethod
    def validate_source_type(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        valid = {"youtube", "vimeo", "mp4", "hls"}
        lowered = v.lower()
        if lowered not in valid:
            raise ValueError(f"Invalid sourceType '{v}'. Must be one of: {sorted(valid)}")
        return lowered


class LivestreamResponse(CamelModel):
    id: int
    user_id: str
    title: str
    description: Optional[str] = None
    source_url: str
    source_type: str
    last_view_position: int
    created_at: datetime
    embed_url: Optional[str] = Field(
        default=None, description="Player URL derived from sourceUrl for iframe embeds"
    )


class PositionUpdate(CamelModel):
    position: int = Field(ge=0, description="Playback position in whole seconds")


class LivestreamNoteCreate(CamelModel):
    """
    Body of POST /api/livestreams/{id}/notes.

    When `bible_reference` is omitted the server attaches the first reference
    found in `content` (if any).
    """

    content: str = Field(min_length=1, max_length=20000)
    timestamp_seconds: int = Field(default=0, ge=0)
    bible_reference: Optional[str] = Field(default=None, max_length=100)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Note content must not be blank")
        return v


class LivestreamNoteResponse(CamelModel):
    id: int
    user_id: str
    livestream_id: int
    timestamp_seconds: int
    content: str
    bible_reference: Optional[str] = None
    created_at: datetime


class DetectedVerseCreate(CamelModel):
    bible_reference: str = Field(min_length=1, max_length=100)
    timestamp_seconds: int = Field(default=0, ge=0)


class DetectedVerseResponse(CamelModel):
    id: int
    livestream_id: int
    bible_reference: str
    timestamp_seconds: int
    created_at: datetime


class DetectedHymnCreate(CamelModel):
    """`hymn_id` wins when given; otherwise the title is matched against the hymnal."""

    title: str = Field(min_length=1, max_length=255)
    hymn_id: Optional[int] = Field(default=None, gt=0)
    timestamp_seconds: int = Field(default=0, ge=0)


class DetectedHymnResponse(CamelModel):
    id: int
    livestream_id: int
    hymn_id: Optional[int] = None
    title: str
    timestamp_seconds: int
    created_at: datetime


# ── Transcripts / AI annotation ───────────────────────────────────────────


class TranscriptSegmentIn(CamelModel):
    start_seconds: int = Field(ge=0)
    end_seconds: int = Field(ge=0)
    text: str = Field(min_length=1)


class TranscriptSegmentResponse(CamelModel):
    id: int
    start_seconds: int
    end_seconds: int
    text: str


class TranscriptCreate(CamelModel):
    raw_text: str = Field(min_length=1, max_length=500000)
    segments: List[TranscriptSegmentIn] = Field(default_factory=list)


class TranscriptResponse(CamelModel):
    id: int
    livestream_id: int
    status: str = Field(description="pending, completed or failed")
    raw_text: str
    error_message: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    segments: List[TranscriptSegmentResponse] = Field(default_factory=list)


class AnnotationResponse(CamelModel):
    """Result of POST /api/livestreams/{id}/transcript."""

    transcript: TranscriptResponse
    detected_verses: List[DetectedVerseResponse] = Field(default_factory=list)
    detected_hymns: List[DetectedHymnResponse] = Field(default_factory=list)
