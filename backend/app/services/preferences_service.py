"""User reading preferences: one row per user, created on first write."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError
from app.models.library import UserPreferences

logger = logging.getLogger(__name__)

DEFAULT_THEME_MODE = "light"
DEFAULT_FONT_SIZE = "medium"


class PreferencesService:

    async def get_preferences(self, db: AsyncSession, user_id: str) -> UserPreferences:
        """
        Stored preferences, or an unsaved instance carrying the defaults
        when the user has never saved any.
        """
        result = await db.execute(select(UserPreferences).where(UserPreferences.user_id == user_id))
        prefs = result.scalar_one_or_none()
        if prefs is not None:
            return prefs
        return UserPreferences(
            user_id=user_id,
            preferred_translation=settings.default_translation,
            theme_mode=DEFAULT_THEME_MODE,
            font_size=DEFAULT_FONT_SIZE,
        )

    async def save_preferences(
        self,
        db: AsyncSession,
        user_id: str,
        preferred_translation: Optional[str] = None,
        theme_mode: Optional[str] = None,
        font_size: Optional[str] = None,
    ) -> UserPreferences:
        """Upsert; None fields keep the stored (or default) value."""
        try:
            result = await db.execute(
                select(UserPreferences).where(UserPreferences.user_id == user_id)
            )
            prefs = result.scalar_one_or_none()
            if prefs is None:
                prefs = UserPreferences(
                    user_id=user_id,
                    preferred_translation=settings.default_translation,
                    theme_mode=DEFAULT_THEME_MODE,
                    font_size=DEFAULT_FONT_SIZE,
                )
                db.add(prefs)

            if preferred_translation is not None:
                prefs.preferred_translation = preferred_translation
            if theme_mode is not None:
                prefs.theme_mode = theme_mode
            if font_size is not None:
                prefs.font_size = font_size

            await db.flush()
            return prefs
        except SQLAlchemyError as e:
            logger.error("Database error saving preferences: %s", str(e))
            raise DatabaseError(context={"user_id": user_id})


preferences_service = PreferencesService()
