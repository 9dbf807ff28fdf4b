"""Hymnal, saved hymn and playlist schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class HymnResponse(CamelModel):
    id: int
    title: str
    lyrics: str
    composer: Optional[str] = None
    year: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    tune: Optional[str] = None
    meter: Optional[str] = None


class SavedHymnCreate(CamelModel):
    hymn_id: int = Field(gt=0)


class SavedHymnResponse(CamelModel):
    id: int
    user_id: str
    hymn_id: int
    created_at: datetime


class SavedHymnWithHymnResponse(SavedHymnResponse):
    hymn: HymnResponse


class PlaylistCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)


class PlaylistHymnAdd(CamelModel):
    hymn_id: int = Field(gt=0)
    order_index: Optional[int] = Field(
        default=None, ge=0, description="Defaults to the end of the playlist"
    )


class PlaylistItemResponse(CamelModel):
    id: int
    playlist_id: int
    hymn_id: int
    order_index: int


class PlaylistResponse(CamelModel):
    id: int
    user_id: str
    title: str
    created_at: datetime


class PlaylistDetailResponse(PlaylistResponse):
    hymns: List[HymnResponse] = Field(
        default_factory=list, description="Hymns in order_index order"
    )
