"""
storefront/services/image_service.py

Purpose: Image uploads to Cloudinary

- Product images padded to 800x800 on white
- Testimonial avatars cropped to 200x200 around the face
- Uploads run in a worker thread (the SDK is blocking)
"""

import asyncio
from typing import Any, Dict, List

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from storefront.core.config import settings
from storefront.core.exceptions import ExternalServiceError
from storefront.core.logging import get_logger

logger = get_logger(__name__)

PRODUCT_TRANSFORM = {
    "width": 800,
    "height": 800,
    "crop": "pad",
    "background": "white",
    "quality": "auto",
    "fetch_format": "auto",
}

TESTIMONIAL_TRANSFORM = {
    "width": 200,
    "height": 200,
    "crop": "fill",
    "gravity": "face",
    "quality": "auto",
    "fetch_format": "auto",
}

_configured = False


def _configure():
    global _configured

    if _configured:
        return
    if not settings.cloudinary_configured:
        raise ExternalServiceError("Image uploads are not configured")

    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    _configured = True


async def upload_image(content: bytes, subfolder: str, options: Dict[str, Any]) -> str:
    """
    Uploads raw image bytes and returns the secure URL.

    Raises:
        ExternalServiceError: when Cloudinary is not configured or rejects the upload
    """
    _configure()
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.upload,
            content,
            folder=f"{settings.CLOUDINARY_FOLDER}/{subfolder}",
            resource_type="image",
            **options,
        )
    except Exception as e:
        logger.error(f"Cloudinary upload failed: {str(e)}")
        raise ExternalServiceError("Image upload failed") from e
    return result["secure_url"]


async def upload_product_images(files: List[UploadFile]) -> List[str]:
    urls = []
    for file in files:
        content = await file.read()
        if not content:
            continue
        urls.append(await upload_image(content, "products", PRODUCT_TRANSFORM))

    if urls:
        logger.info(f"Uploaded {len(urls)} product image(s)")
    return urls


async def upload_testimonial_image(file: UploadFile) -> str:
    content = await file.read()
    return await upload_image(content, "testimonials", TESTIMONIAL_TRANSFORM)
