"""
storefront/api/categories.py

Purpose: Category endpoints (public reads cached, admin writes)
"""

from fastapi import APIRouter, Depends, Request, Response, status

from storefront.api.deps import require_admin
from storefront.core.config import settings
from storefront.schemas.catalog import CategoryCreateRequest, CategoryUpdateRequest
from storefront.services import category_service
from storefront.services.cache_service import api_cache
from utils.serialization import serialize_doc

router = APIRouter()

CACHE_PREFIX = f"{settings.API_PREFIX}/categories"


@router.get("")
async def list_categories(request: Request, response: Response):
    cached = api_cache.lookup(request, response)
    if cached is not None:
        return cached

    categories = await category_service.list_categories()
    data = {"success": True, "categories": serialize_doc(categories)}
    api_cache.store(request, response, data, settings.CACHE_TTL_CATEGORIES)
    return data


@router.get("/{slug}")
async def get_category(slug: str, request: Request, response: Response):
    cached = api_cache.lookup(request, response)
    if cached is not None:
        return cached

    category = await category_service.get_category_by_slug(slug)
    data = {"success": True, "category": serialize_doc(category)}
    api_cache.store(request, response, data, settings.CACHE_TTL_CATEGORIES)
    return data


@router.post("/create", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(payload: CategoryCreateRequest):
    category = await category_service.create_category(payload.name, payload.image)
    api_cache.clear(CACHE_PREFIX)
    return {
        "success": True,
        "message": "Category created successfully",
        "category": serialize_doc(category),
    }


@router.put("/{category_id}", dependencies=[Depends(require_admin)])
async def update_category(category_id: str, payload: CategoryUpdateRequest):
    category = await category_service.update_category(category_id, payload.name, payload.image)
    api_cache.clear(CACHE_PREFIX)
    return {
        "success": True,
        "message": "Category updated successfully",
        "category": serialize_doc(category),
    }


@router.delete("/{category_id}", dependencies=[Depends(require_admin)])
async def delete_category(category_id: str):
    await category_service.delete_category(category_id)
    api_cache.clear(CACHE_PREFIX)
    return {"success": True, "message": "Category deleted successfully"}
