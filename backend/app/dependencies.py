"""
FastAPI dependencies for caller identity.

    get_current_user   → 401 unless a valid bearer token is presented
    get_optional_user  → None for anonymous callers or bad tokens

Routes depend on these rather than on IdentityService directly, so tests can
swap the caller with `app.dependency_overrides[get_current_user]`.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import AuthenticationError
from app.services.identity_service import AuthenticatedUser, identity_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False, description="Identity provider access token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized - No token provided")
    return await identity_service.verify_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthenticatedUser]:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await identity_service.verify_token(credentials.credentials)
    except AuthenticationError:
        logger.debug("Ignoring invalid token on optional-auth route")
        return None
