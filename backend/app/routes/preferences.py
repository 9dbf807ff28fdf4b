"""GET/PUT /api/preferences — the caller's reading preferences (upsert on PUT)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.schemas.library import PreferencesResponse, PreferencesUpdate
from app.services.identity_service import AuthenticatedUser
from app.services.preferences_service import preferences_service

router = APIRouter(prefix="/api", tags=["Preferences"])


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await preferences_service.get_preferences(db, user.id)


@router.put("/preferences", response_model=PreferencesResponse)
async def save_preferences(
    body: PreferencesUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await preferences_service.save_preferences(
        db,
        user.id,
        preferred_translation=body.preferred_translation,
        theme_mode=body.theme_mode,
        font_size=body.font_size,
    )
