"""
storefront/api/auth.py

Purpose: Account endpoints (mounted at /api/user and /api/auth)

- Register / login / logout with cookie + bearer token
- Profile read and update
- Forgot / reset password
- Google sign-in redirect flow
"""

import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from storefront.api.deps import get_current_user
from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError
from storefront.core.logging import get_logger
from storefront.core.security import AUTH_COOKIE_NAME, auth_cookie_params, create_access_token
from storefront.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
)
from storefront.services import google_oauth_service, user_service
from utils.serialization import serialize_doc

logger = get_logger(__name__)
router = APIRouter()


def _session_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "_id": str(user["_id"]),
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role"),
        "avatar": user.get("avatar"),
    }


def _issue_session(response: Response, user: Dict[str, Any]) -> str:
    token = create_access_token(user)
    response.set_cookie(value=token, **auth_cookie_params())
    return token


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, response: Response):
    user = await user_service.register_user(payload.name, payload.email, payload.password)
    token = _issue_session(response, user)
    return {
        "success": True,
        "message": "User registered & logged in successfully",
        "user": _session_user(user),
        "token": token,
    }


@router.post("/login")
async def login(payload: LoginRequest, response: Response):
    user = await user_service.authenticate_user(payload.email, payload.password)
    token = _issue_session(response, user)
    logger.info("User logged in", extra={"user_id": str(user["_id"])})
    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": _session_user(user),
    }


@router.get("/logout")
async def logout(response: Response, user: dict = Depends(get_current_user)):
    params = auth_cookie_params()
    response.delete_cookie(
        AUTH_COOKIE_NAME,
        httponly=params["httponly"],
        secure=params["secure"],
        samesite=params["samesite"],
    )
    return {"success": True, "message": "Logged out successfully"}


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user)):
    profile = await user_service.get_profile(user["id"])
    return {"success": True, "user": serialize_doc(profile)}


@router.put("/profile")
async def update_profile(payload: UpdateProfileRequest, user: dict = Depends(get_current_user)):
    profile = await user_service.update_profile(user["id"], payload.name, payload.email)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "user": serialize_doc(profile),
    }


@router.post("/forgot-password")
async def forgot_password(payload: ForgotPasswordRequest):
    try:
        await user_service.request_password_reset(payload.email)
    except StorefrontError as e:
        if e.status_code == 404:
            raise
        raise StorefrontError("Email could not be sent", code="EMAIL_SEND_FAILED", status_code=500)
    return {"success": True, "message": "Email sent"}


@router.post("/reset-password/{token}")
async def reset_password(token: str, payload: ResetPasswordRequest):
    await user_service.reset_password(token, payload.password)
    return {"success": True, "message": "Password updated successfully"}


# ============================================================
# GOOGLE OAUTH
# ============================================================

@router.get("/google")
async def google_login():
    state = secrets.token_urlsafe(16)
    response = RedirectResponse(google_oauth_service.build_authorization_url(state))
    response.set_cookie(
        google_oauth_service.OAUTH_STATE_COOKIE,
        state,
        max_age=600,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/google/callback")
async def google_callback(request: Request, code: Optional[str] = None, state: Optional[str] = None):
    failure_url = f"{settings.FRONTEND_URL}/login?error=auth_failed"
    expected_state = request.cookies.get(google_oauth_service.OAUTH_STATE_COOKIE)

    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google callback rejected: missing code or state mismatch")
        return RedirectResponse(failure_url)

    try:
        profile = await google_oauth_service.fetch_profile(code)
        user = await user_service.find_or_create_google_user(profile)
    except StorefrontError as e:
        logger.error(f"Google login failed: {e.message}")
        return RedirectResponse(failure_url)

    token = create_access_token(user)
    response = RedirectResponse(f"{settings.FRONTEND_URL}/login?token={token}")
    response.set_cookie(value=token, **auth_cookie_params())
    response.delete_cookie(google_oauth_service.OAUTH_STATE_COOKIE)
    return response
