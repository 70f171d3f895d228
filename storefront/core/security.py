"""
storefront/core/security.py

Purpose: Credentials and tokens

- bcrypt password hashing
- JWT access tokens (issue / decode)
- Password-reset token generation and hashing
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import bcrypt
import jwt

from storefront.core.config import settings
from storefront.core.exceptions import AuthenticationError

AUTH_COOKIE_NAME = "token"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Placeholder passwords of OAuth accounts are not bcrypt hashes
        return False


def create_access_token(user: Dict[str, Any]) -> str:
    """
    Issues a signed access token for a user document.

    The payload carries the user id, e-mail and role so that route guards
    can authorize without a database round trip.
    """
    payload = {
        "id": str(user["_id"]),
        "email": user.get("email"),
        "role": user.get("role", "user"),
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Unauthorized: Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Unauthorized: Invalid token")


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """
    Returns (raw_token, token_hash). Only the hash is persisted; the raw
    token goes into the e-mailed link.
    """
    raw = secrets.token_hex(20)
    return raw, hash_reset_token(raw)


def auth_cookie_params() -> Dict[str, Any]:
    return {
        "key": AUTH_COOKIE_NAME,
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": "lax",
        "max_age": settings.JWT_EXPIRES_DAYS * 24 * 60 * 60,
    }
