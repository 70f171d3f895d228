"""
storefront/services/coupon_service.py

Purpose: Discount coupons

- Eligibility checks (active, expiry, usage limit, minimum purchase)
- Discount calculation capped at the cart total
- Admin create / list / delete
- Usage counting when an order redeems a coupon
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from storefront.core.exceptions import BadRequestError, ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_coupons_collection
from utils.constants import DISCOUNT_PERCENTAGE
from utils.serialization import to_object_id
from utils.time_utils import is_expired, to_naive_utc, utc_now

logger = get_logger(__name__)


def evaluate_coupon(coupon: Dict[str, Any], cart_total: float, now: Optional[datetime] = None) -> float:
    """
    Checks a coupon against a cart subtotal and returns the discount.

    Raises:
        BadRequestError: coupon inactive, expired, used up, or cart below the minimum
    """
    if not coupon.get("isActive", True):
        raise BadRequestError("This coupon is inactive")

    if is_expired(coupon.get("expirationDate"), now):
        raise BadRequestError("This coupon has expired")

    usage_limit = coupon.get("usageLimit")
    if usage_limit and coupon.get("usedCount", 0) >= usage_limit:
        raise BadRequestError("This coupon usage limit has been reached")

    minimum = coupon.get("minPurchaseAmount") or 0
    if cart_total < minimum:
        raise BadRequestError(f"Minimum purchase amount of ₹{minimum} required")

    if coupon.get("discountType") == DISCOUNT_PERCENTAGE:
        discount = cart_total * coupon["discountValue"] / 100
    else:
        discount = coupon["discountValue"]

    return round(min(discount, cart_total), 2)


async def get_coupon_by_code(code: str) -> Optional[Dict[str, Any]]:
    return await get_coupons_collection().find_one({"code": code.strip().upper()})


async def validate_coupon(code: Optional[str], cart_total: float) -> Dict[str, Any]:
    if not code or not code.strip():
        raise BadRequestError("Please provide a coupon code")

    coupon = await get_coupon_by_code(code)
    if not coupon:
        raise ResourceNotFoundError("Invalid coupon code")

    discount = evaluate_coupon(coupon, cart_total)
    return {
        "success": True,
        "isValid": True,
        "discountAmount": discount,
        "couponCode": coupon["code"],
        "message": "Coupon applied successfully",
    }


async def redeem_coupon(coupon: Dict[str, Any]) -> bool:
    """
    Counts one use of the coupon. With a usage limit the increment only
    applies while usedCount is still below it, so concurrent checkouts can't
    overshoot.

    Returns:
        False when the limit was already reached
    """
    query: Dict[str, Any] = {"_id": coupon["_id"]}
    usage_limit = coupon.get("usageLimit")
    if usage_limit:
        query["$or"] = [{"usedCount": {"$lt": usage_limit}}, {"usedCount": {"$exists": False}}]

    result = await get_coupons_collection().update_one(query, {"$inc": {"usedCount": 1}})
    if result.modified_count == 0:
        logger.info(f"Coupon {coupon.get('code')} hit its usage limit at redemption")
        return False
    return True


async def release_coupon(coupon_id):
    await get_coupons_collection().update_one(
        {"_id": coupon_id, "usedCount": {"$gt": 0}},
        {"$inc": {"usedCount": -1}}
    )


async def list_coupons() -> List[Dict[str, Any]]:
    cursor = get_coupons_collection().find().sort("createdAt", DESCENDING)
    return await cursor.to_list(length=None)


async def create_coupon(
    code: Optional[str],
    discount_type: Optional[str],
    discount_value: Optional[float],
    expiration_date: Optional[datetime],
    min_purchase_amount: float = 0,
    usage_limit: Optional[int] = None,
    is_active: bool = True,
) -> Dict[str, Any]:
    if not code or not discount_type or not discount_value or not expiration_date:
        raise BadRequestError("Please provide all required fields")

    coupons = get_coupons_collection()
    code = code.strip().upper()
    if await coupons.find_one({"code": code}):
        raise BadRequestError("Coupon code already exists")

    now = utc_now()
    coupon = {
        "code": code,
        "discountType": discount_type,
        "discountValue": discount_value,
        "minPurchaseAmount": min_purchase_amount or 0,
        "expirationDate": to_naive_utc(expiration_date),
        "isActive": is_active,
        "usageLimit": usage_limit or None,
        "usedCount": 0,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        result = await coupons.insert_one(coupon)
    except DuplicateKeyError:
        raise BadRequestError("Coupon code already exists")

    coupon["_id"] = result.inserted_id
    logger.info(f"Coupon created: {code}")
    return coupon


async def delete_coupon(coupon_id: str):
    oid = to_object_id(coupon_id)
    result = await get_coupons_collection().delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise ResourceNotFoundError("Coupon not found")
