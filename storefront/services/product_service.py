"""
storefront/services/product_service.py

Purpose: Product catalog

- Search, filter, sort and paginate products
- Admin create / update / delete
- Stock updates and inventory reports
"""

import math
import re
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from storefront.core.exceptions import BadRequestError, ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_categories_collection, get_products_collection
from storefront.db.populate import populate
from storefront.services import stock_service
from utils.constants import CATEGORY_FIELDS, PRODUCT_SORTS
from utils.serialization import is_valid_object_id, to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)

# Form fields an admin may set directly
EDITABLE_FIELDS = (
    "title", "description", "brand", "price", "mrp", "size",
    "bulletPoints", "discount", "stock",
)


async def _with_category(products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return await populate(products, "category", get_categories_collection(), CATEGORY_FIELDS)


async def _resolve_category_filter(category: str) -> Any:
    if is_valid_object_id(category):
        return to_object_id(category)

    found = await get_categories_collection().find_one({"slug": category})
    # Unknown slug matches nothing
    return found["_id"] if found else {"$in": []}


async def _require_category(category_id: Any):
    oid = to_object_id(category_id)
    if oid is None or not await get_categories_collection().find_one({"_id": oid}):
        raise BadRequestError("Invalid category ID")
    return oid


async def list_products(
    keyword: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    """
    Returns a page of products matching the filters.

    category accepts either an ObjectId or a category slug.
    """
    query: Dict[str, Any] = {}

    if keyword:
        query["title"] = {"$regex": re.escape(keyword), "$options": "i"}
    if brand:
        query["brand"] = brand
    if min_price is not None or max_price is not None:
        query["price"] = {}
        if min_price is not None:
            query["price"]["$gte"] = min_price
        if max_price is not None:
            query["price"]["$lte"] = max_price
    if category:
        query["category"] = await _resolve_category_filter(category)

    products = get_products_collection()
    cursor = products.find(query)
    if sort in PRODUCT_SORTS:
        cursor = cursor.sort(PRODUCT_SORTS[sort])
    cursor = cursor.skip((page - 1) * limit).limit(limit)

    items = await cursor.to_list(length=limit)
    total = await products.count_documents(query)

    return {
        "success": True,
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit) if limit else 0,
        "products": await _with_category(items),
    }


async def get_product(product_id: str) -> Dict[str, Any]:
    oid = to_object_id(product_id)
    product = await get_products_collection().find_one({"_id": oid}) if oid else None
    if not product:
        raise ResourceNotFoundError("Product not found")

    await _with_category([product])
    return product


async def create_product(fields: Dict[str, Any], image_urls: List[str]) -> Dict[str, Any]:
    """
    Creates a product from admin form fields plus already-uploaded image URLs.
    """
    if not fields.get("title") or not fields.get("category") or not fields.get("price"):
        raise BadRequestError("Title, category and price are required")

    category_id = await _require_category(fields["category"])

    now = utc_now()
    product = {
        "title": fields["title"],
        "description": fields.get("description") or "",
        "category": category_id,
        "brand": fields.get("brand") or "",
        "price": fields["price"],
        "mrp": fields.get("mrp") or 0,
        "size": fields.get("size") or "",
        "bulletPoints": fields.get("bulletPoints") or [],
        "discount": fields.get("discount") or 0,
        "stock": max(0, int(fields.get("stock") or 0)),
        "image": image_urls[0] if image_urls else None,
        "images": image_urls,
        "averageRating": 0,
        "numReviews": 0,
        "createdAt": now,
        "updatedAt": now,
    }

    result = await get_products_collection().insert_one(product)
    product["_id"] = result.inserted_id
    logger.info(f"Product created: {product['title']}", extra={"product_id": str(result.inserted_id)})
    return product


async def update_product(
    product_id: str,
    fields: Dict[str, Any],
    existing_images: Optional[List[str]] = None,
    new_image_urls: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Applies a partial update.

    The final image list is existing_images (when sent) followed by the new
    uploads. Without existing_images, new uploads are appended to the current
    images.
    """
    products = get_products_collection()
    oid = to_object_id(product_id)
    current = await products.find_one({"_id": oid}) if oid else None
    if not current:
        raise ResourceNotFoundError("Product not found")

    updates = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS and value is not None}
    if "stock" in updates:
        updates["stock"] = max(0, int(updates["stock"]))

    if fields.get("category"):
        updates["category"] = await _require_category(fields["category"])

    new_image_urls = new_image_urls or []
    if existing_images is not None or new_image_urls:
        if existing_images is not None:
            images = list(existing_images)
        else:
            images = list(current.get("images") or [])
            if not images and current.get("image"):
                images = [current["image"]]
        images.extend(new_image_urls)
        updates["images"] = images
        updates["image"] = images[0] if images else None

    updates["updatedAt"] = utc_now()
    product = await products.find_one_and_update(
        {"_id": oid},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )

    await _with_category([product])
    logger.info("Product updated", extra={"product_id": product_id})
    return product


async def update_stock(product_id: str, stock: Optional[Any]) -> Dict[str, Any]:
    if stock is None:
        raise BadRequestError("Stock value is required")

    oid = to_object_id(product_id)
    product = await get_products_collection().find_one_and_update(
        {"_id": oid},
        {"$set": {"stock": max(0, int(stock)), "updatedAt": utc_now()}},
        return_document=ReturnDocument.AFTER,
    ) if oid else None

    if not product:
        raise ResourceNotFoundError("Product not found")
    return product


async def delete_product(product_id: str):
    oid = to_object_id(product_id)
    result = await get_products_collection().delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise ResourceNotFoundError("Product not found")
    logger.info("Product deleted", extra={"product_id": product_id})


async def low_stock_report() -> Dict[str, Any]:
    products = await stock_service.get_low_stock_products()
    return {"success": True, "count": len(products), "products": products}


async def out_of_stock_report() -> Dict[str, Any]:
    products = await stock_service.get_out_of_stock_products()
    return {"success": True, "count": len(products), "products": products}
