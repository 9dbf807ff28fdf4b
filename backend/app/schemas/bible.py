"""
Selah Backend — Bible & Study Schemas
======================================

Request/response contracts for verses, highlights, saved verses, study notes
and the reference extractor endpoint.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


class VerseResponse(CamelModel):
    id: int
    book: str
    chapter: int
    verse: int
    text: str
    translation: str


class ChapterCountResponse(CamelModel):
    book: str
    translation: str
    count: int = Field(ge=1, description="Highest chapter number seeded for the book (1 if none)")


# ── Highlights ────────────────────────────────────────────────────────────


class HighlightCreate(CamelModel):
    """
    Body of POST /api/highlights.

    Posting again for the same verse updates `color` and `note` in place.
    """

    verse_id: int = Field(gt=0)
    color: str = Field(default="yellow", min_length=1, max_length=20)
    note: Optional[str] = Field(default=None, max_length=5000)


class HighlightResponse(CamelModel):
    id: int
    user_id: str
    verse_id: int
    color: str
    note: Optional[str] = None
    created_at: datetime


class HighlightWithVerseResponse(HighlightResponse):
    verse: VerseResponse


# ── Saved verses ──────────────────────────────────────────────────────────


class SavedVerseCreate(CamelModel):
    verse_id: int = Field(gt=0)


class SavedVerseResponse(CamelModel):
    id: int
    user_id: str
    verse_id: int
    created_at: datetime


class SavedVerseWithVerseResponse(SavedVerseResponse):
    verse: VerseResponse


# ── Study notes ───────────────────────────────────────────────────────────


class StudyNoteCreate(CamelModel):
    content: str = Field(min_length=1, max_length=20000)
    verse_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Note content must not be blank")
        return v


class StudyNoteResponse(CamelModel):
    id: int
    user_id: str
    verse_id: Optional[int] = None
    content: str
    created_at: datetime
    verse: Optional[VerseResponse] = None


# ── Reference extraction ──────────────────────────────────────────────────


class ExtractReferencesRequest(CamelModel):
    text: str = Field(default="", max_length=100000)


class ExtractReferencesResponse(CamelModel):
    references: List[str] = Field(
        description="Distinct references in order of first appearance"
    )
