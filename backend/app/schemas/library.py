"""
Devotional library, reading progress, daily devotional, preferences and
public catalog schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from app.schemas.common import CamelModel


class DevotionalChapterSummary(CamelModel):
    id: int
    title: str
    order_index: int


class DevotionalChapterResponse(DevotionalChapterSummary):
    book_id: int
    content: str


class DevotionalBookResponse(CamelModel):
    id: int
    owner_id: Optional[str] = None
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    cover_color: str
    is_public: bool
    source: Optional[str] = None
    source_id: Optional[str] = None
    created_at: datetime


class DevotionalBookDetailResponse(DevotionalBookResponse):
    chapters: List[DevotionalChapterSummary] = Field(default_factory=list)


class BookProgressUpdate(CamelModel):
    book_id: int = Field(gt=0)
    current_chapter_id: Optional[int] = Field(default=None, gt=0)


class BookProgressResponse(CamelModel):
    id: int
    user_id: str
    book_id: int
    current_chapter_id: Optional[int] = None
    last_read_at: datetime


class BookHighlightCreate(CamelModel):
    chapter_id: int = Field(gt=0)
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    color: str = Field(default="yellow", min_length=1, max_length=20)
    note: Optional[str] = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    def check_offsets(self) -> "BookHighlightCreate":
        if self.end_offset < self.start_offset:
            raise ValueError("endOffset must not precede startOffset")
        return self


class BookHighlightResponse(CamelModel):
    id: int
    user_id: str
    chapter_id: int
    start_offset: int
    end_offset: int
    color: str
    note: Optional[str] = None
    created_at: datetime


class DailyDevotionalResponse(CamelModel):
    id: int
    day_of_year: int
    title: str
    scripture_reference: str
    scripture_text: str
    reflection: str
    prayer: str
    author: Optional[str] = None


# ── Preferences ───────────────────────────────────────────────────────────


class PreferencesUpdate(CamelModel):
    """All fields optional; omitted fields keep their stored (or default) value."""

    preferred_translation: Optional[str] = Field(default=None, min_length=1, max_length=20)
    theme_mode: Optional[str] = Field(default=None)
    font_size: Optional[str] = Field(default=None)

    @field_validator("theme_mode")
    @classmethod
    def validate_theme_mode(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in {"light", "dark", "system"}:
            raise ValueError("themeMode must be one of: light, dark, system")
        return v

    @field_validator("font_size")
    @classmethod
    def validate_font_size(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in {"small", "medium", "large"}:
            raise ValueError("fontSize must be one of: small, medium, large")
        return v


class PreferencesResponse(CamelModel):
    user_id: str
    preferred_translation: str
    theme_mode: str
    font_size: str


# ── Public book catalog ───────────────────────────────────────────────────


class CatalogBook(CamelModel):
    gutenberg_id: int
    title: str
    authors: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    has_plain_text: bool


class CatalogSearchResponse(CamelModel):
    results: List[CatalogBook] = Field(default_factory=list)


class CatalogImportRequest(CamelModel):
    gutenberg_id: int = Field(gt=0)
