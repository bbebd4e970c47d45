"""
JWT token utilities.

Tokens are issued by the identity service; this module decodes them and can
mint tokens for tooling and tests. The subject claim carries the user_id.
"""

from datetime import timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from liftlog.config import settings
from liftlog.utils.clock import utcnow


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's UUID
        expires_delta: Lifetime override (defaults to the configured expiry)

    Returns:
        Encoded JWT token string
    """
    issued_at = utcnow()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload = {
        "sub": str(user_id),
        "exp": issued_at + expires_delta,
        "iat": issued_at,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[UUID]:
    """
    Decode and validate a JWT access token.

    Returns:
        user_id (UUID) if token is valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        user_id_str: str = payload.get("sub")
        if user_id_str is None:
            return None
        return UUID(user_id_str)
    except (JWTError, ValueError):
        return None
