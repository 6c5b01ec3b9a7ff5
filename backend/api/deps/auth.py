"""
Bearer token authentication dependency.

Verifies an HS256 JWT from the Authorization header and resolves the
caller. Tokens are minted by the identity service, not here.

Dependencies: PyJWT, fastapi
System role: Caller identity for protected routes
"""

import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.api.deps.dependencies import get_settings_dependency
from backend.configs import Settings
from backend.core.exceptions import UnauthenticatedError
from backend.models.user import AuthenticatedUser

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_token(token: str, settings: Settings) -> AuthenticatedUser:
    """
    Verify a token and extract the caller.

    Args:
        token: Raw JWT
        settings: Settings holding the verification secret

    Returns:
        AuthenticatedUser: Caller identified by the ``sub`` claim

    Raises:
        UnauthenticatedError: Expired, badly signed or malformed token
    """
    try:
        claims = jwt.decode(
            token,
            settings.auth.jwt_secret,
            algorithms=[settings.auth.jwt_algorithm],
            options={"require": ["sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthenticatedError("Token expired") from e
    except jwt.InvalidTokenError as e:
        logger.warning(f"{__name__}:decode_token - Rejected token: {e}")
        raise UnauthenticatedError("Invalid token") from e

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as e:
        raise UnauthenticatedError("Invalid token subject") from e
    return AuthenticatedUser(id=user_id, email=claims.get("email"))


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings_dependency),
) -> AuthenticatedUser:
    """
    FastAPI dependency resolving the authenticated caller.

    Raises:
        UnauthenticatedError: Missing or invalid bearer token
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Missing bearer token")
    return decode_token(credentials.credentials, settings)
