"""
Access token issuing and verification.

Tokens are JWTs signed with HMAC (HS256 by default) using the process-wide
secret from ``settings.jwt_secret``. Payload: ``sub`` (user id), ``email``,
``iat`` and ``exp``. Every verification failure raises the same
``InvalidTokenError`` so callers cannot tell an expired token from a forged one.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from blogql.config import settings


class InvalidTokenError(Exception):
    """Token is malformed, tampered with, expired, or missing claims."""


class TokenClaims(BaseModel):
    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


def create_access_token(
    user_id: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for ``user_id`` that expires after ``expires_delta`` (default 1h)."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expiry_minutes))
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry and return the claims.

    Raises ``InvalidTokenError`` on any failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require_sub": True, "require_exp": True},
        )
        return TokenClaims(
            user_id=payload["sub"],
            email=payload["email"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (JWTError, KeyError, TypeError, ValueError, ValidationError) as e:
        raise InvalidTokenError(str(e)) from e
