"""
Selah Backend — Identity Provider Token Validation
===================================================

What:  Resolves a bearer token to the user it was issued to.
How:   GET {auth_provider_url}/auth/v1/user with the caller's token and the
       project's anon key. 200 → user; anything else → AuthenticationError.
Who:   Used by app.dependencies.get_current_user / get_optional_user.

The identity provider owns sessions, refresh and sign-in; this backend never
sees passwords and keeps no users table. User ids are opaque strings.

Failure policy:
    A provider outage is reported as 401, not 5xx: the request cannot be
    authenticated either way, and clients already handle 401 by re-auth.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None
    role: Optional[str] = None


class IdentityService:
    """
    Args:
        transport: Optional httpx transport; tests pass httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def verify_token(self, token: str) -> AuthenticatedUser:
        """
        Raises:
            AuthenticationError: Empty/invalid/expired token or provider unreachable
        """
        if not token:
            raise AuthenticationError("Unauthorized - No token provided")

        headers = {"Authorization": f"Bearer {token}"}
        if settings.auth_provider_anon_key:
            headers["apikey"] = settings.auth_provider_anon_key

        try:
            async with httpx.AsyncClient(
                base_url=settings.auth_provider_url,
                timeout=httpx.Timeout(settings.auth_timeout),
                transport=self.transport,
            ) as client:
                response = await client.get("/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Identity provider unreachable: %s", str(e))
            raise AuthenticationError(context={"error_type": type(e).__name__})

        if response.status_code != 200:
            logger.debug("Token rejected by identity provider (status=%d)", response.status_code)
            raise AuthenticationError("Unauthorized - Invalid token")

        try:
            payload = response.json()
        except ValueError:
            raise AuthenticationError("Unauthorized - Invalid token")

        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise AuthenticationError("Unauthorized - Invalid token")

        return AuthenticatedUser(
            id=str(user_id),
            email=payload.get("email"),
            role=payload.get("role"),
        )


identity_service = IdentityService()
