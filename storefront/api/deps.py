"""
storefront/api/deps.py

Purpose: Shared route dependencies

- Access-token extraction (Authorization header first, then cookie)
- Required and optional authentication
- Role guards
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Request

from storefront.core.exceptions import AuthenticationError, PermissionDeniedError
from storefront.core.logging import get_logger
from storefront.core.security import AUTH_COOKIE_NAME, decode_access_token

logger = get_logger(__name__)


def extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return request.cookies.get(AUTH_COOKIE_NAME)


async def get_current_user(request: Request) -> Dict[str, Any]:
    """
    Resolves the caller from the access token.

    Returns the token claims ({"id", "email", "role"}). Raises 401 when the
    token is missing, expired or invalid.
    """
    token = extract_token(request)
    if not token:
        raise AuthenticationError("Unauthorized: No token provided")

    claims = decode_access_token(token)
    if not claims.get("id"):
        raise AuthenticationError("Unauthorized: Invalid token")
    return claims


async def get_optional_user(request: Request) -> Optional[Dict[str, Any]]:
    """
    Same as get_current_user, but guests (no or bad token) resolve to None.
    """
    token = extract_token(request)
    if not token:
        return None

    try:
        claims = decode_access_token(token)
    except AuthenticationError as e:
        logger.debug(f"Ignoring bad token on optional-auth route: {e.message}")
        return None
    return claims if claims.get("id") else None


def require_roles(*roles: str):
    """
    Builds a dependency that only lets users with one of the given roles through.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles("admin"))])
    """
    async def role_guard(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if not user.get("role") or user["role"] not in roles:
            raise PermissionDeniedError("Forbidden: insufficient rights")
        return user

    return role_guard


require_admin = require_roles("admin")
