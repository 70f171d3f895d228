"""
storefront/services/user_service.py

Purpose: Account management

- Registration and credential checks
- Profile reads and updates
- Password reset tokens
- Google account linking
- Admin account seeding
"""

import secrets
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from storefront.core.config import settings
from storefront.core.exceptions import BadRequestError, ResourceNotFoundError
from storefront.core.logging import get_logger, LogContext
from storefront.core.security import (
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from storefront.db.mongo import get_users_collection
from storefront.services.email_service import send_password_reset_email
from utils.constants import ROLE_ADMIN, ROLE_USER
from utils.serialization import to_object_id
from utils.time_utils import minutes_from_now, utc_now
from utils.validation_utils import validate_password_strength

logger = get_logger(__name__)

PRIVATE_FIELDS = ("password", "resetPasswordToken", "resetPasswordExpire")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strips credential fields from a user document.
    """
    return {key: value for key, value in user.items() if key not in PRIVATE_FIELDS}


def _check_password(password: str):
    problems = validate_password_strength(password)
    if problems:
        raise BadRequestError(
            f"Password must contain {', '.join(problems)}",
            details={"password": problems}
        )


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return await get_users_collection().find_one({"email": normalize_email(email)})


async def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    return await get_users_collection().find_one({"_id": oid})


async def register_user(name: str, email: str, password: str) -> Dict[str, Any]:
    """
    Creates a customer account.

    Raises:
        BadRequestError: e-mail already registered or weak password
    """
    email = normalize_email(email)
    users = get_users_collection()

    if await users.find_one({"email": email}):
        raise BadRequestError("Email already registered")

    _check_password(password)

    now = utc_now()
    user = {
        "name": name.strip(),
        "email": email,
        "password": hash_password(password),
        "avatar": None,
        "googleId": None,
        "role": ROLE_USER,
        "createdAt": now,
        "updatedAt": now,
    }

    try:
        result = await users.insert_one(user)
    except DuplicateKeyError:
        raise BadRequestError("Email already registered")

    user["_id"] = result.inserted_id
    logger.info("New user registered", extra={"user_id": str(result.inserted_id)})
    return user


async def authenticate_user(email: str, password: str) -> Dict[str, Any]:
    user = await get_user_by_email(email)
    if not user:
        raise BadRequestError("User not found")

    if not verify_password(password, user.get("password")):
        logger.info("Failed login attempt", extra={"user_id": str(user["_id"])})
        raise BadRequestError("Invalid password")

    return user


async def get_profile(user_id: str) -> Dict[str, Any]:
    user = await get_user_by_id(user_id)
    if not user:
        raise ResourceNotFoundError("User not found")
    return public_user(user)


async def update_profile(user_id: str, name: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
    users = get_users_collection()
    oid = to_object_id(user_id)
    updates: Dict[str, Any] = {}

    if name:
        updates["name"] = name.strip()

    if email:
        email = normalize_email(email)
        existing = await users.find_one({"email": email})
        if existing and existing["_id"] != oid:
            raise BadRequestError("Email already in use")
        updates["email"] = email

    if updates:
        updates["updatedAt"] = utc_now()
        await users.update_one({"_id": oid}, {"$set": updates})

    return await get_profile(user_id)


async def request_password_reset(email: str) -> str:
    """
    Stores a hashed single-use reset token and e-mails the raw token link.

    Returns:
        The reset URL that was sent

    Raises:
        ResourceNotFoundError: no account for the e-mail
        ExternalServiceError: the e-mail could not be sent (token is cleared)
    """
    users = get_users_collection()
    user = await get_user_by_email(email)
    if not user:
        raise ResourceNotFoundError("User not found with this email")

    raw_token, token_hash = generate_reset_token()
    await users.update_one(
        {"_id": user["_id"]},
        {"$set": {
            "resetPasswordToken": token_hash,
            "resetPasswordExpire": minutes_from_now(settings.PASSWORD_RESET_EXPIRE_MINUTES),
        }}
    )

    reset_url = f"{settings.FRONTEND_URL}/reset-password/{raw_token}"

    with LogContext(user_id=str(user["_id"])):
        try:
            await send_password_reset_email(user, reset_url)
        except Exception:
            await users.update_one(
                {"_id": user["_id"]},
                {"$unset": {"resetPasswordToken": "", "resetPasswordExpire": ""}}
            )
            raise

        logger.info("Password reset requested")

    return reset_url


async def reset_password(token: str, password: str):
    users = get_users_collection()
    user = await users.find_one({
        "resetPasswordToken": hash_reset_token(token),
        "resetPasswordExpire": {"$gt": utc_now()},
    })
    if not user:
        raise BadRequestError("Invalid or expired token")

    _check_password(password)

    await users.update_one(
        {"_id": user["_id"]},
        {
            "$set": {"password": hash_password(password), "updatedAt": utc_now()},
            "$unset": {"resetPasswordToken": "", "resetPasswordExpire": ""},
        }
    )
    logger.info("Password reset completed", extra={"user_id": str(user["_id"])})


async def find_or_create_google_user(profile: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolves a Google profile ({"sub", "email", "name", "picture"}) to a
    local account. An existing account with the same e-mail gets the Google
    id linked; otherwise a new account with an unusable password is created.
    """
    users = get_users_collection()
    email = normalize_email(profile["email"])
    google_id = profile.get("sub")

    user = await users.find_one({"email": email})
    if user:
        if not user.get("googleId"):
            updates = {"googleId": google_id, "updatedAt": utc_now()}
            if not user.get("avatar") and profile.get("picture"):
                updates["avatar"] = profile["picture"]
            await users.update_one({"_id": user["_id"]}, {"$set": updates})
            user.update(updates)
            logger.info("Linked Google account", extra={"user_id": str(user["_id"])})
        return user

    now = utc_now()
    user = {
        "name": profile.get("name") or email.split("@")[0],
        "email": email,
        "password": hash_password(secrets.token_hex(16)),
        "avatar": profile.get("picture"),
        "googleId": google_id,
        "role": ROLE_USER,
        "createdAt": now,
        "updatedAt": now,
    }
    result = await users.insert_one(user)
    user["_id"] = result.inserted_id
    logger.info("New user registered via Google", extra={"user_id": str(result.inserted_id)})
    return user


async def ensure_admin_user() -> Optional[Dict[str, Any]]:
    """
    Creates the admin account from ADMIN_EMAIL / ADMIN_PASSWORD when it does
    not exist yet, or promotes an existing account with that e-mail.
    """
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None

    users = get_users_collection()
    email = normalize_email(settings.ADMIN_EMAIL)
    existing = await users.find_one({"email": email})

    if existing:
        if existing.get("role") != ROLE_ADMIN:
            await users.update_one({"_id": existing["_id"]}, {"$set": {"role": ROLE_ADMIN}})
            logger.info(f"Promoted {email} to admin")
        return existing

    now = utc_now()
    admin = {
        "name": "Admin",
        "email": email,
        "password": hash_password(settings.ADMIN_PASSWORD),
        "role": ROLE_ADMIN,
        "createdAt": now,
        "updatedAt": now,
    }
    result = await users.insert_one(admin)
    admin["_id"] = result.inserted_id
    logger.info(f"✅ Admin account created: {email}")
    return admin
