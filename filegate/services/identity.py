import logging
from typing import Optional

import httpx
from fastapi import Depends

from filegate.core.config import Settings, get_settings
from filegate.core.errors import IdentityUnavailableError, SessionExpiredError
from filegate.models.user import AuthenticatedUser

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Invalid or expired session. Please log in again."
IDENTITY_UNAVAILABLE_MESSAGE = "Authentication service unavailable. Please try again."


class IdentityVerifier:
    """Asks the identity provider which user a bearer token belongs to."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self.transport = transport

    async def verify(self, token: str) -> AuthenticatedUser:
        headers = {"Authorization": f"Bearer {token}", "apikey": self.service_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error("Identity provider request failed: %s", e)
            raise IdentityUnavailableError(IDENTITY_UNAVAILABLE_MESSAGE) from e

        if response.status_code >= 500:
            logger.error("Identity provider failed (status %s)", response.status_code)
            raise IdentityUnavailableError(IDENTITY_UNAVAILABLE_MESSAGE)

        if response.status_code != 200:
            logger.error("Identity provider rejected token (status %s)", response.status_code)
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Identity provider returned a non-JSON body")
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE) from e

        if not isinstance(data, dict) or not data.get("id"):
            logger.error("Identity provider response has no user id")
            raise SessionExpiredError(SESSION_EXPIRED_MESSAGE)
        return AuthenticatedUser(id=str(data["id"]), email=data.get("email"))


def get_identity_verifier(settings: Settings = Depends(get_settings)) -> IdentityVerifier:
    settings.require_identity()
    return IdentityVerifier(
        settings.IDENTITY_URL,
        settings.IDENTITY_SERVICE_KEY,
        timeout=settings.IDENTITY_TIMEOUT,
    )
