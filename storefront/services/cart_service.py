"""
storefront/services/cart_service.py

Purpose: Per-user shopping cart

- One cart document per user (created on first add)
- Line add / quantity update / remove / clear
- Guest cart merge after login
"""

from typing import Any, Dict, List

from storefront.core.exceptions import BadRequestError, ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_carts_collection, get_products_collection
from storefront.db.populate import populate_items
from utils.constants import CART_PRODUCT_FIELDS
from utils.serialization import to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)


def _find_line(cart: Dict[str, Any], product_oid) -> Dict[str, Any]:
    for item in cart.get("items", []):
        if item["product"] == product_oid:
            return item
    return None


async def _save_items(cart: Dict[str, Any]):
    await get_carts_collection().update_one(
        {"_id": cart["_id"]},
        {"$set": {"items": cart["items"], "updatedAt": utc_now()}}
    )


async def _populated(cart: Dict[str, Any]) -> Dict[str, Any]:
    await populate_items([cart], get_products_collection(), CART_PRODUCT_FIELDS)
    return cart


async def _get_or_create_cart(user_oid) -> Dict[str, Any]:
    carts = get_carts_collection()
    cart = await carts.find_one({"user": user_oid})
    if cart:
        return cart

    now = utc_now()
    cart = {"user": user_oid, "items": [], "createdAt": now, "updatedAt": now}
    result = await carts.insert_one(cart)
    cart["_id"] = result.inserted_id
    return cart


async def _require_product(product_id: str):
    oid = to_object_id(product_id)
    if oid is None or not await get_products_collection().find_one({"_id": oid}, {"_id": 1}):
        raise ResourceNotFoundError("Product not found")
    return oid


async def get_cart(user_id: str) -> Dict[str, Any]:
    cart = await get_carts_collection().find_one({"user": to_object_id(user_id)})
    if not cart:
        return {"items": []}
    return await _populated(cart)


async def add_item(user_id: str, product_id: str, quantity: int = 1) -> Dict[str, Any]:
    product_oid = await _require_product(product_id)
    cart = await _get_or_create_cart(to_object_id(user_id))

    line = _find_line(cart, product_oid)
    if line:
        line["quantity"] += quantity
    else:
        cart["items"].append({"product": product_oid, "quantity": quantity})

    await _save_items(cart)
    return await _populated(cart)


async def update_quantity(user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
    if quantity < 1:
        raise BadRequestError("Quantity must be at least 1")

    cart = await get_carts_collection().find_one({"user": to_object_id(user_id)})
    if not cart:
        raise ResourceNotFoundError("Cart not found")

    line = _find_line(cart, to_object_id(product_id))
    if not line:
        raise ResourceNotFoundError("Product not in cart")

    line["quantity"] = quantity
    await _save_items(cart)
    return await _populated(cart)


async def remove_item(user_id: str, product_id: str) -> Dict[str, Any]:
    cart = await get_carts_collection().find_one({"user": to_object_id(user_id)})
    if not cart:
        raise ResourceNotFoundError("Cart not found")

    product_oid = to_object_id(product_id)
    cart["items"] = [item for item in cart["items"] if item["product"] != product_oid]
    await _save_items(cart)
    return await _populated(cart)


async def clear_cart(user_id: str):
    await get_carts_collection().update_one(
        {"user": to_object_id(user_id)},
        {"$set": {"items": [], "updatedAt": utc_now()}}
    )


async def merge_guest_cart(user_id: str, guest_items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Folds a guest cart [{"productId", "quantity"}, ...] into the user's cart.

    Unknown products are skipped. When both carts hold the same product the
    larger quantity wins.
    """
    cart = await _get_or_create_cart(to_object_id(user_id))
    products = get_products_collection()
    merged = 0

    for guest in guest_items:
        product_oid = to_object_id(guest.get("productId"))
        if product_oid is None or not await products.find_one({"_id": product_oid}, {"_id": 1}):
            continue

        quantity = max(1, int(guest.get("quantity") or 1))
        line = _find_line(cart, product_oid)
        if line:
            line["quantity"] = max(line["quantity"], quantity)
        else:
            cart["items"].append({"product": product_oid, "quantity": quantity})
        merged += 1

    await _save_items(cart)
    logger.info(f"Merged {merged} guest cart line(s)", extra={"user_id": user_id})
    return await _populated(cart)
