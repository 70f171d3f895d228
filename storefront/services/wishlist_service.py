"""
storefront/services/wishlist_service.py

Purpose: Per-user wishlist of product references
"""

from typing import Any, Dict, List, Tuple

from storefront.core.exceptions import ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_products_collection, get_wishlists_collection
from storefront.db.populate import populate_list
from utils.constants import CART_PRODUCT_FIELDS
from utils.serialization import to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)


async def _get_or_create(user_oid) -> Dict[str, Any]:
    wishlists = get_wishlists_collection()
    wishlist = await wishlists.find_one({"user": user_oid})
    if wishlist:
        return wishlist

    now = utc_now()
    wishlist = {"user": user_oid, "products": [], "createdAt": now, "updatedAt": now}
    result = await wishlists.insert_one(wishlist)
    wishlist["_id"] = result.inserted_id
    return wishlist


async def _save(wishlist: Dict[str, Any]):
    await get_wishlists_collection().update_one(
        {"_id": wishlist["_id"]},
        {"$set": {"products": wishlist["products"], "updatedAt": utc_now()}}
    )


async def add_product(user_id: str, product_id: str) -> Tuple[Dict[str, Any], bool]:
    """
    Returns (wishlist, added). added is False when the product was already listed.
    """
    product_oid = to_object_id(product_id)
    if product_oid is None or not await get_products_collection().find_one({"_id": product_oid}, {"_id": 1}):
        raise ResourceNotFoundError("Product not found")

    wishlist = await _get_or_create(to_object_id(user_id))
    if product_oid in wishlist["products"]:
        return wishlist, False

    wishlist["products"].append(product_oid)
    await _save(wishlist)
    return wishlist, True


async def remove_product(user_id: str, product_id: str) -> Dict[str, Any]:
    wishlist = await get_wishlists_collection().find_one({"user": to_object_id(user_id)})
    if not wishlist:
        raise ResourceNotFoundError("Wishlist not found")

    product_oid = to_object_id(product_id)
    wishlist["products"] = [oid for oid in wishlist["products"] if oid != product_oid]
    await _save(wishlist)
    return wishlist


async def get_wishlist(user_id: str) -> Dict[str, Any]:
    wishlist = await get_wishlists_collection().find_one({"user": to_object_id(user_id)})
    if not wishlist:
        return {"products": []}

    await populate_list([wishlist], "products", get_products_collection(), CART_PRODUCT_FIELDS)
    return wishlist


async def merge_guest_wishlist(user_id: str, product_ids: List[str]) -> Dict[str, Any]:
    wishlist = await _get_or_create(to_object_id(user_id))
    products = get_products_collection()

    for product_id in product_ids:
        product_oid = to_object_id(product_id)
        if product_oid is None or product_oid in wishlist["products"]:
            continue
        if await products.find_one({"_id": product_oid}, {"_id": 1}):
            wishlist["products"].append(product_oid)

    await _save(wishlist)
    await populate_list([wishlist], "products", products, CART_PRODUCT_FIELDS)
    return wishlist
