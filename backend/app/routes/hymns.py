"""
Hymnal routes.

Public:
    GET /api/hymns?q=&tag=    ordered by title
    GET /api/hymns/tags       sorted distinct tags
    GET /api/hymns/{id}

Authenticated:
    GET    /api/saved-hymns, /api/saved-hymns/full
    POST   /api/saved-hymns                 idempotent
    DELETE /api/saved-hymns/{hymnId}        keyed by hymn id
    GET    /api/playlists, POST /api/playlists
    GET    /api/playlists/{id}              with hymns in order
    POST   /api/playlists/{id}/hymns
    DELETE /api/playlists/{id}
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.hymn import (
    HymnResponse,
    PlaylistCreate,
    PlaylistDetailResponse,
    PlaylistHymnAdd,
    PlaylistItemResponse,
    PlaylistResponse,
    SavedHymnCreate,
    SavedHymnResponse,
    SavedHymnWithHymnResponse,
)
from app.services.hymn_service import hymn_service
from app.services.identity_service import AuthenticatedUser

router = APIRouter(prefix="/api", tags=["Hymns"])


# ── Hymnal (public) ───────────────────────────────────────────────────────


@router.get("/hymns", response_model=List[HymnResponse])
async def list_hymns(
    q: Optional[str] = Query(default=None, max_length=200, description="Title or composer substring"),
    tag: Optional[str] = Query(default=None, max_length=50),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.list_hymns(db, q=q, tag=tag)


@router.get("/hymns/tags", response_model=List[str])
async def list_hymn_tags(db: AsyncSession = Depends(get_db_session)):
    return await hymn_service.list_tags(db)


@router.get(
    "/hymns/{hymn_id}",
    response_model=HymnResponse,
    responses={404: {"description": "Hymn not found", "model": ErrorResponse}},
)
async def get_hymn(hymn_id: int, db: AsyncSession = Depends(get_db_session)):
    return await hymn_service.get_hymn(db, hymn_id)


# ── Saved hymns ───────────────────────────────────────────────────────────


@router.get("/saved-hymns", response_model=List[SavedHymnResponse])
async def list_saved_hymns(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.list_saved(db, user.id)


@router.get("/saved-hymns/full", response_model=List[SavedHymnWithHymnResponse])
async def list_saved_hymns_full(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.list_saved_with_hymns(db, user.id)


@router.post("/saved-hymns", response_model=SavedHymnResponse)
async def save_hymn(
    body: SavedHymnCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.save_hymn(db, user.id, body.hymn_id)


@router.delete("/saved-hymns/{hymn_id}", response_model=SuccessResponse)
async def unsave_hymn(
    hymn_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await hymn_service.unsave_hymn(db, hymn_id, user.id)
    return SuccessResponse()


# ── Playlists ─────────────────────────────────────────────────────────────


@router.get("/playlists", response_model=List[PlaylistResponse])
async def list_playlists(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.list_playlists(db, user.id)


@router.post("/playlists", response_model=PlaylistResponse, status_code=201)
async def create_playlist(
    body: PlaylistCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.create_playlist(db, user.id, body.title)


@router.get(
    "/playlists/{playlist_id}",
    response_model=PlaylistDetailResponse,
    responses={404: {"description": "Playlist not found", "model": ErrorResponse}},
)
async def get_playlist(
    playlist_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.get_playlist(db, playlist_id, user.id)


@router.post("/playlists/{playlist_id}/hymns", response_model=PlaylistItemResponse, status_code=201)
async def add_hymn_to_playlist(
    playlist_id: int,
    body: PlaylistHymnAdd,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await hymn_service.add_hymn_to_playlist(
        db, playlist_id, user.id, hymn_id=body.hymn_id, order_index=body.order_index
    )


@router.delete("/playlists/{playlist_id}", response_model=SuccessResponse)
async def delete_playlist(
    playlist_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await hymn_service.delete_playlist(db, playlist_id, user.id)
    return SuccessResponse()
