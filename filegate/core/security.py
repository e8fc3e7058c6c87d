import logging

from fastapi import Security, Depends
from fastapi.security import APIKeyHeader

from filegate.core.errors import AuthenticationError
from filegate.models.user import AuthenticatedUser
from filegate.services.identity import IdentityVerifier, get_identity_verifier

logger = logging.getLogger(__name__)

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def extract_bearer_token(header_value: str) -> str:
    if not header_value or not header_value.startswith("Bearer "):
        raise AuthenticationError("Missing or invalid authorization header")
    token = header_value[len("Bearer "):].strip()
    if not token or " " in token:
        raise AuthenticationError("Missing or invalid authorization header")
    return token


async def get_bearer_token(header_value: str = Security(authorization_header)) -> str:
    return extract_bearer_token(header_value)


async def get_current_user(
    token: str = Depends(get_bearer_token),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> AuthenticatedUser:
    user = await verifier.verify(token)
    logger.info("User authenticated: %s", user.id)
    return user
