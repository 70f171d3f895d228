"""
storefront/services/category_service.py

Purpose: Product categories

- CRUD with unique names
- Slugs derived from the name and kept in sync on rename
"""

from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from storefront.core.exceptions import BadRequestError, ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_categories_collection
from utils.serialization import to_object_id
from utils.time_utils import utc_now
from utils.validation_utils import slugify

logger = get_logger(__name__)


async def list_categories() -> List[Dict[str, Any]]:
    cursor = get_categories_collection().find().sort("createdAt", DESCENDING)
    return await cursor.to_list(length=None)


async def get_category_by_slug(slug: str) -> Dict[str, Any]:
    category = await get_categories_collection().find_one({"slug": slug})
    if not category:
        raise ResourceNotFoundError("Category not found")
    return category


async def get_category_by_id(category_id: Any) -> Optional[Dict[str, Any]]:
    oid = to_object_id(category_id)
    if oid is None:
        return None
    return await get_categories_collection().find_one({"_id": oid})


async def create_category(name: Optional[str], image: Optional[str] = None) -> Dict[str, Any]:
    if not name or not name.strip():
        raise BadRequestError("Category name is required")

    name = name.strip()
    categories = get_categories_collection()
    if await categories.find_one({"name": name}):
        raise BadRequestError("Category already exists")

    now = utc_now()
    category = {
        "name": name,
        "slug": slugify(name),
        "image": image,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        result = await categories.insert_one(category)
    except DuplicateKeyError:
        raise BadRequestError("Category already exists")

    category["_id"] = result.inserted_id
    logger.info(f"Category created: {name}")
    return category


async def update_category(category_id: str, name: Optional[str] = None, image: Optional[str] = None) -> Dict[str, Any]:
    categories = get_categories_collection()
    category = await get_category_by_id(category_id)
    if not category:
        raise ResourceNotFoundError("Category not found")

    updates: Dict[str, Any] = {}
    if name and name.strip() and name.strip() != category["name"]:
        name = name.strip()
        clash = await categories.find_one({"name": name, "_id": {"$ne": category["_id"]}})
        if clash:
            raise BadRequestError("Category already exists")
        updates["name"] = name
        updates["slug"] = slugify(name)
    if image:
        updates["image"] = image

    if updates:
        updates["updatedAt"] = utc_now()
        await categories.update_one({"_id": category["_id"]}, {"$set": updates})
        category.update(updates)

    return category


async def delete_category(category_id: str):
    oid = to_object_id(category_id)
    result = await get_categories_collection().delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise ResourceNotFoundError("Category not found")
    logger.info(f"Category deleted: {category_id}")
