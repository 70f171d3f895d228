"""
storefront/services/google_oauth_service.py

Purpose: Google sign-in (OAuth 2.0 authorization code flow)

- Builds the consent-screen URL
- Exchanges the callback code for tokens
- Fetches the OpenID Connect profile
"""

from typing import Any, Dict
from urllib.parse import urlencode

import httpx

from storefront.core.config import settings
from storefront.core.exceptions import ExternalServiceError, ResourceNotFoundError
from storefront.core.logging import get_logger

logger = get_logger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

OAUTH_STATE_COOKIE = "oauth_state"


def _require_configured():
    if not settings.google_oauth_configured:
        raise ResourceNotFoundError("Google login is not configured")


def callback_url() -> str:
    return f"{settings.SERVER_URL}{settings.API_PREFIX}/auth/google/callback"


def build_authorization_url(state: str) -> str:
    _require_configured()
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": callback_url(),
        "response_type": "code",
        "scope": "openid profile email",
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def fetch_profile(code: str) -> Dict[str, Any]:
    """
    Exchanges an authorization code for the user's Google profile.

    Returns:
        {"sub", "email", "name", "picture", ...}

    Raises:
        ExternalServiceError: token exchange or profile fetch failed, or the
        profile carries no e-mail
    """
    _require_configured()
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            token_response = await client.post(GOOGLE_TOKEN_URL, data={
                "code": code,
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "redirect_uri": callback_url(),
                "grant_type": "authorization_code",
            })
            if token_response.status_code != 200:
                logger.error(f"Google token exchange failed: {token_response.text[:200]}")
                raise ExternalServiceError("Google token exchange failed")

            access_token = token_response.json()["access_token"]
            profile_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"}
            )
            if profile_response.status_code != 200:
                logger.error(f"Google profile fetch failed: {profile_response.status_code}")
                raise ExternalServiceError("Google profile fetch failed")

    except httpx.RequestError as e:
        logger.error(f"Google OAuth connection error: {str(e)}")
        raise ExternalServiceError("Unable to reach Google")

    profile = profile_response.json()
    if not profile.get("email"):
        raise ExternalServiceError("No email provided by Google")

    logger.info("🔐 Google profile received")
    return profile
