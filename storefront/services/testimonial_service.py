"""
storefront/services/testimonial_service.py

Purpose: Customer testimonials shown on the storefront
"""

from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from pymongo import DESCENDING

from storefront.core.exceptions import BadRequestError, ExternalServiceError, ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_testimonials_collection
from storefront.services import image_service
from utils.constants import DEFAULT_TESTIMONIAL_ROLE
from utils.serialization import to_object_id
from utils.time_utils import utc_now
from utils.validation_utils import parse_number

logger = get_logger(__name__)

MAX_CONTENT_LENGTH = 500


def _rating(value: Any, default: Optional[int]) -> Optional[int]:
    rating = parse_number(value)
    if rating is None:
        return default
    rating = int(rating)
    if not 1 <= rating <= 5:
        raise BadRequestError("Rating must be between 1 and 5")
    return rating


async def _try_upload(image: Optional[UploadFile]) -> Optional[str]:
    """
    Testimonials are saved even when the avatar upload fails.
    """
    if image is None or not image.filename:
        return None
    try:
        return await image_service.upload_testimonial_image(image)
    except ExternalServiceError as e:
        logger.warning(f"Testimonial image skipped: {e.message}")
        return None


async def list_testimonials() -> List[Dict[str, Any]]:
    return await get_testimonials_collection().find().sort("createdAt", DESCENDING).to_list(length=None)


async def create_testimonial(
    name: str,
    content: str,
    role: Optional[str] = None,
    rating: Any = None,
    image: Optional[UploadFile] = None,
) -> Dict[str, Any]:
    if not name or not content:
        raise BadRequestError("Name and content are required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise BadRequestError(f"Content must be at most {MAX_CONTENT_LENGTH} characters")

    now = utc_now()
    testimonial = {
        "name": name,
        "role": role or DEFAULT_TESTIMONIAL_ROLE,
        "content": content,
        "rating": _rating(rating, 5),
        "image": await _try_upload(image) or "",
        "createdAt": now,
        "updatedAt": now,
    }
    result = await get_testimonials_collection().insert_one(testimonial)
    testimonial["_id"] = result.inserted_id
    return testimonial


async def update_testimonial(
    testimonial_id: str,
    name: Optional[str] = None,
    content: Optional[str] = None,
    role: Optional[str] = None,
    rating: Any = None,
    image: Optional[UploadFile] = None,
) -> Dict[str, Any]:
    collection = get_testimonials_collection()
    oid = to_object_id(testimonial_id)
    testimonial = await collection.find_one({"_id": oid}) if oid else None
    if not testimonial:
        raise ResourceNotFoundError("Testimonial not found")

    updates: Dict[str, Any] = {}
    if name:
        updates["name"] = name
    if role:
        updates["role"] = role
    if content:
        if len(content) > MAX_CONTENT_LENGTH:
            raise BadRequestError(f"Content must be at most {MAX_CONTENT_LENGTH} characters")
        updates["content"] = content
    new_rating = _rating(rating, None)
    if new_rating is not None:
        updates["rating"] = new_rating

    image_url = await _try_upload(image)
    if image_url:
        updates["image"] = image_url

    updates["updatedAt"] = utc_now()
    await collection.update_one({"_id": oid}, {"$set": updates})
    testimonial.update(updates)
    return testimonial


async def delete_testimonial(testimonial_id: str):
    oid = to_object_id(testimonial_id)
    result = await get_testimonials_collection().delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise ResourceNotFoundError("Testimonial not found")
