"""
CallBoard Backend — Password Hashing & Bearer Tokens
======================================================

What:  bcrypt password hashing and HS256 JWT issue/verify.
Why:   Kept apart from the services so the auth dependency and AuthService
       share one implementation and tests can exercise it without a database.

Token format:
    {"uid": "<user uuid>", "sid": "<session uuid>", "iat": <unix seconds>}
    No expiry claim: tokens live until their session row is deleted (logout).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

import bcrypt
import jwt
from pydantic import BaseModel

from app.config import settings
from app.exceptions import AuthenticationError, ValidationError

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
BCRYPT_MAX_BYTES = 72


class TokenPayload(BaseModel):
    """Decoded bearer token claims."""
    uid: uuid.UUID
    sid: uuid.UUID
    iat: int


def hash_password(password: str) -> str:
    """Hash a plain-text password with bcrypt using the configured cost factor."""
    secret = password.encode("utf-8")
    if len(secret) > BCRYPT_MAX_BYTES:
        raise ValidationError(
            message=f'"password" must be at most {BCRYPT_MAX_BYTES} bytes long',
            field="password",
        )
    salt = bcrypt.gensalt(rounds=settings.hash_rounds)
    return bcrypt.hashpw(secret, salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of a plain-text password against a stored hash."""
    secret = password.encode("utf-8")
    if len(secret) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, password_hash.encode("ascii"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user_id: uuid.UUID, session_id: uuid.UUID) -> str:
    payload: Dict[str, Any] = {
        "uid": str(user_id),
        "sid": str(session_id),
        "iat": int(datetime.now(timezone.utc).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify the signature and parse the claims.

    Raises:
        AuthenticationError: bad signature, malformed token, or missing/invalid claims.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["uid", "sid"]},
        )
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(context={"reason": type(e).__name__})

    try:
        return TokenPayload(
            uid=claims["uid"],
            sid=claims["sid"],
            iat=claims.get("iat", 0),
        )
    except (ValueError, TypeError) as e:
        raise AuthenticationError(context={"reason": "invalid_claims", "detail": str(e)})
