"""
storefront/services/stock_service.py

Purpose: Inventory bookkeeping

- Conditional atomic stock decrements (never below zero)
- Stock restoration on rollback and cancellation
- Low / out-of-stock reports
- Pre-checkout availability checks
"""

from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument

from storefront.core.config import settings
from storefront.core.exceptions import BadRequestError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_products_collection
from utils.serialization import to_object_id

logger = get_logger(__name__)


async def decrement_stock(product_id: Any, quantity: int) -> Optional[Dict[str, Any]]:
    """
    Takes quantity units out of stock in a single conditional update.

    Returns:
        The updated product, or None when the product is missing or has
        fewer than quantity units left
    """
    return await get_products_collection().find_one_and_update(
        {"_id": to_object_id(product_id), "stock": {"$gte": quantity}},
        {"$inc": {"stock": -quantity}},
        return_document=ReturnDocument.AFTER,
    )


async def increment_stock(product_id: Any, quantity: int) -> Optional[Dict[str, Any]]:
    return await get_products_collection().find_one_and_update(
        {"_id": to_object_id(product_id)},
        {"$inc": {"stock": quantity}},
        return_document=ReturnDocument.AFTER,
    )


async def is_in_stock(product_id: Any, quantity: int = 1) -> bool:
    product = await get_products_collection().find_one({"_id": to_object_id(product_id)}, {"stock": 1})
    return bool(product) and (product.get("stock") or 0) >= quantity


async def get_low_stock_products(threshold: Optional[int] = None) -> List[Dict[str, Any]]:
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    cursor = get_products_collection().find(
        {"stock": {"$lte": threshold, "$gt": 0}}
    ).sort("stock", ASCENDING)
    return await cursor.to_list(length=None)


async def get_out_of_stock_products() -> List[Dict[str, Any]]:
    cursor = get_products_collection().find({"stock": 0})
    return await cursor.to_list(length=None)


async def validate_order_items(items: List[Dict[str, Any]]) -> List[str]:
    """
    Checks availability for [{"product": id, "quantity": n}, ...].

    Returns:
        One message per unavailable line (empty list when all are available)
    """
    errors = []
    products = get_products_collection()

    for item in items:
        product = await products.find_one({"_id": to_object_id(item["product"])})
        if not product:
            errors.append(f"Product {item['product']} not found")
            continue

        available = product.get("stock") or 0
        if available < item["quantity"]:
            errors.append(
                f"{product.get('title')}: Only {available} available (requested {item['quantity']})"
            )
    return errors


async def reserve_stock(lines: List[Dict[str, Any]]):
    """
    Decrements stock for each {"product", "quantity", "title"} line in order.
    If any line cannot be covered, lines already taken are put back and
    BadRequestError("<title> out of stock") is raised.
    """
    reserved = []
    for line in lines:
        updated = await decrement_stock(line["product"], line["quantity"])
        if updated is None:
            for taken in reserved:
                await increment_stock(taken["product"], taken["quantity"])
            logger.info(
                f"Stock reservation failed, restored {len(reserved)} line(s)",
                extra={"product_id": str(line["product"])}
            )
            raise BadRequestError(f"{line.get('title') or 'Product'} out of stock")
        reserved.append(line)


async def restore_stock(items: List[Dict[str, Any]]):
    for item in items:
        await increment_stock(item["product"], item["quantity"])
