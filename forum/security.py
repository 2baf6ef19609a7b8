"""Security utilities for JWT authentication and salted password hashing."""

import base64
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.hash import pbkdf2_sha256

from forum.config import settings
from forum.exceptions import AuthenticationError


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def generate_salt(n_bytes: int | None = None) -> str:
    """Return a random salt, base64-encoded for storage in ``users.salt``."""
    return base64.b64encode(secrets.token_bytes(n_bytes or settings.PASSWORD_SALT_BYTES)).decode()


def hash_password(password: str, salt: str) -> str:
    """
    Hash *password* with PBKDF2-SHA256 using the given per-user *salt*.

    The same (password, salt) pair always yields the same hash, so the
    result can be compared directly against ``users.hashed_password``.
    """
    handler = pbkdf2_sha256.using(salt=base64.b64decode(salt), rounds=settings.PASSWORD_HASH_ROUNDS)
    return handler.hash(password)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def create_access_token(
    user_id: int,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token carrying the user's id, email and role."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token.

    Raises:
        AuthenticationError: if the token is malformed, expired, or was
            issued for another audience/issuer.
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as e:
        raise AuthenticationError() from e


def generate_refresh_token() -> str:
    return secrets.token_urlsafe(64)


def refresh_token_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=settings.REFRESH_TOKEN_EXPIRE_HOURS)
