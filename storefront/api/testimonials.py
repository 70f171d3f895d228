"""
storefront/api/testimonials.py

Purpose: Testimonial endpoints (public list cached, admin multipart writes)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status

from storefront.api.deps import require_admin
from storefront.core.config import settings
from storefront.services import testimonial_service
from storefront.services.cache_service import api_cache
from utils.serialization import serialize_doc

router = APIRouter()

CACHE_PREFIX = f"{settings.API_PREFIX}/testimonials"


@router.get("")
async def list_testimonials(request: Request, response: Response):
    cached = api_cache.lookup(request, response)
    if cached is not None:
        return cached

    testimonials = await testimonial_service.list_testimonials()
    data = {"success": True, "testimonials": serialize_doc(testimonials)}
    api_cache.store(request, response, data, settings.CACHE_TTL_TESTIMONIALS)
    return data


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_testimonial(
    name: str = Form(...),
    content: str = Form(...),
    role: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    testimonial = await testimonial_service.create_testimonial(name, content, role, rating, image)
    api_cache.clear(CACHE_PREFIX)
    return {
        "success": True,
        "message": "Testimonial created",
        "testimonial": serialize_doc(testimonial),
    }


@router.put("/{testimonial_id}", dependencies=[Depends(require_admin)])
async def update_testimonial(
    testimonial_id: str,
    name: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    testimonial = await testimonial_service.update_testimonial(
        testimonial_id, name, content, role, rating, image
    )
    api_cache.clear(CACHE_PREFIX)
    return {
        "success": True,
        "message": "Testimonial updated",
        "testimonial": serialize_doc(testimonial),
    }


@router.delete("/{testimonial_id}", dependencies=[Depends(require_admin)])
async def delete_testimonial(testimonial_id: str):
    await testimonial_service.delete_testimonial(testimonial_id)
    api_cache.clear(CACHE_PREFIX)
    return {"success": True, "message": "Testimonial deleted"}
