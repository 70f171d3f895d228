"""
storefront/services/order_service.py

Purpose: Checkout and order management

- Cart -> order pipeline (address, coupon, stock, shipping, totals)
- Idempotent placement via client-supplied keys
- Order history and admin status changes
- Payment log bookkeeping
"""

from typing import Any, Dict, List, Optional, Tuple

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from storefront.core.exceptions import (
    BadRequestError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from storefront.core.logging import get_logger, LogContext
from storefront.db.mongo import (
    get_carts_collection,
    get_orders_collection,
    get_payment_logs_collection,
    get_products_collection,
    get_users_collection,
)
from storefront.db.populate import populate, populate_items
from storefront.services import address_service, coupon_service, shipping_service, stock_service
from utils.constants import (
    DEFAULT_CURRENCY,
    ORDER_PRODUCT_FIELDS,
    PAYMENT_LOG_LIMIT,
    PAYMENT_LOG_STATUSES,
    ROLE_ADMIN,
    USER_SUMMARY_FIELDS,
)
from utils.serialization import is_valid_object_id, to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)

# Order payment status -> payment log status
LOG_STATUS_FOR_PAYMENT = {
    "pending": "pending",
    "paid": "success",
    "failed": "failed",
    "refunded": "refunded",
}


# ============================================================
# PAYMENT LOGS
# ============================================================

async def create_payment_log(
    user_id: Any,
    order: Dict[str, Any],
    payment_method: str,
    status: str,
    payment_id: Optional[str] = None,
    provider_response: Optional[Dict[str, Any]] = None,
):
    """
    Records a payment attempt. Never fails the caller.
    """
    try:
        now = utc_now()
        await get_payment_logs_collection().insert_one({
            "user": to_object_id(user_id),
            "order": order["_id"],
            "amount": order["totalAmount"],
            "currency": DEFAULT_CURRENCY,
            "paymentMethod": payment_method,
            "paymentId": payment_id,
            "status": status,
            "providerResponse": provider_response or {},
            "createdAt": now,
            "updatedAt": now,
        })
    except Exception as e:
        logger.error(
            f"Failed to create payment log (non-blocking): {str(e)}",
            extra={"order_id": str(order["_id"])}
        )


async def sync_payment_logs(order_id, status: str):
    try:
        await get_payment_logs_collection().update_many(
            {"order": order_id},
            {"$set": {"status": status, "updatedAt": utc_now()}}
        )
    except Exception as e:
        logger.error(f"Failed to sync payment logs: {str(e)}", extra={"order_id": str(order_id)})


# ============================================================
# PLACEMENT
# ============================================================

async def _find_by_idempotency_key(user_oid, key: str) -> Optional[Dict[str, Any]]:
    existing = await get_orders_collection().find_one({"idempotencyKey": key})
    if existing and existing["user"] != user_oid:
        raise BadRequestError("Idempotency key already used")
    return existing


async def _build_lines(cart: Dict[str, Any]) -> List[Dict[str, Any]]:
    product_ids = [item["product"] for item in cart["items"]]
    cursor = get_products_collection().find({"_id": {"$in": product_ids}})
    products = {product["_id"]: product async for product in cursor}

    lines = []
    for item in cart["items"]:
        product = products.get(item["product"])
        if not product:
            raise BadRequestError("Product out of stock")
        lines.append({
            "product": product["_id"],
            "quantity": item["quantity"],
            "price": product["price"],
            "title": product.get("title"),
        })
    return lines


async def place_order(
    user_id: str,
    address_id: str,
    payment_method: str,
    payment_id: Optional[str] = None,
    coupon_code: Optional[str] = None,
    idempotency_key: Optional[str] = None,
    payment_status: Optional[str] = None,
    razorpay_order_id: Optional[str] = None,
    provider_response: Optional[Dict[str, Any]] = None,
) -> Tuple[Dict[str, Any], bool]:
    """
    Turns the user's cart into an order.

    Stock is taken per line with a conditional update; if a later line runs
    short, earlier lines are restored before the 400 is raised.

    Returns:
        (order, created). created is False when idempotency_key matched an
        order placed earlier, in which case nothing else happens.
    """
    user_oid = to_object_id(user_id)

    with LogContext(user_id=user_id):
        if idempotency_key:
            existing = await _find_by_idempotency_key(user_oid, idempotency_key)
            if existing:
                logger.info("Idempotent replay, returning existing order", extra={"order_id": str(existing["_id"])})
                return existing, False

        carts = get_carts_collection()
        cart = await carts.find_one({"user": user_oid})
        if not cart or not cart.get("items"):
            raise BadRequestError("Cart is empty")

        address = await address_service.get_user_address(user_id, address_id)
        if not address:
            raise BadRequestError("Invalid address")

        shipping_settings = await shipping_service.get_settings()
        if payment_method == "COD" and shipping_settings.get("codEnabled") is False:
            raise BadRequestError("Cash on Delivery is currently disabled")

        lines = await _build_lines(cart)
        subtotal = round(sum(line["price"] * line["quantity"] for line in lines), 2)

        coupon = None
        discount = 0
        if coupon_code:
            coupon = await coupon_service.get_coupon_by_code(coupon_code)
            if not coupon:
                raise BadRequestError("Invalid coupon code")
            discount = coupon_service.evaluate_coupon(coupon, subtotal)
            if not await coupon_service.redeem_coupon(coupon):
                raise BadRequestError("This coupon usage limit has been reached")

        try:
            await stock_service.reserve_stock(lines)
        except BadRequestError:
            if coupon:
                await coupon_service.release_coupon(coupon["_id"])
            raise

        shipping_cost = shipping_service.compute_shipping_cost(subtotal, shipping_settings)
        if payment_status is None:
            payment_status = "pending" if payment_method == "COD" else "paid"

        now = utc_now()
        order = {
            "user": user_oid,
            "items": [
                {"product": line["product"], "quantity": line["quantity"], "price": line["price"]}
                for line in lines
            ],
            "shippingAddress": {field: address.get(field) for field in address_service.ADDRESS_FIELDS},
            "paymentMethod": payment_method,
            "paymentStatus": payment_status,
            "orderStatus": "processing",
            "subtotal": subtotal,
            "discountAmount": discount,
            "couponCode": coupon["code"] if coupon else None,
            "shippingCost": shipping_cost,
            "totalAmount": round(subtotal - discount + shipping_cost, 2),
            "paymentId": payment_id,
            "razorpayOrderId": razorpay_order_id,
            "createdAt": now,
            "updatedAt": now,
        }
        if idempotency_key:
            order["idempotencyKey"] = idempotency_key

        try:
            result = await get_orders_collection().insert_one(order)
        except DuplicateKeyError:
            # Concurrent request with the same key won the insert
            await stock_service.restore_stock(lines)
            if coupon:
                await coupon_service.release_coupon(coupon["_id"])
            existing = await _find_by_idempotency_key(user_oid, idempotency_key)
            return existing, False

        order["_id"] = result.inserted_id

        with LogContext(order_id=str(order["_id"])):
            await carts.update_one({"_id": cart["_id"]}, {"$set": {"items": [], "updatedAt": utc_now()}})

            if payment_method != "COD" and payment_id:
                log_status = "success"
            else:
                log_status = "pending"
            await create_payment_log(
                user_id, order, payment_method, log_status,
                payment_id=payment_id, provider_response=provider_response
            )

            logger.info(f"🛒 Order placed: {len(lines)} line(s), total {order['totalAmount']}")

        return order, True


# ============================================================
# QUERIES
# ============================================================

async def get_my_orders(user_id: str) -> List[Dict[str, Any]]:
    cursor = get_orders_collection().find({"user": to_object_id(user_id)}).sort("createdAt", DESCENDING)
    orders = await cursor.to_list(length=None)
    return await populate_items(orders, get_products_collection(), ORDER_PRODUCT_FIELDS)


async def get_order(order_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    if not is_valid_object_id(order_id):
        raise BadRequestError("Invalid order id")

    order = await get_orders_collection().find_one({"_id": to_object_id(order_id)})
    if not order:
        raise ResourceNotFoundError("Order not found")

    if str(order["user"]) != user["id"] and user.get("role") != ROLE_ADMIN:
        raise PermissionDeniedError("Unauthorized")

    await populate_items([order], get_products_collection(), ORDER_PRODUCT_FIELDS)
    return order


async def list_all_orders() -> List[Dict[str, Any]]:
    orders = await get_orders_collection().find().sort("createdAt", DESCENDING).to_list(length=None)
    await populate(orders, "user", get_users_collection(), USER_SUMMARY_FIELDS)
    return await populate_items(orders, get_products_collection(), ORDER_PRODUCT_FIELDS)


# ============================================================
# ADMIN UPDATES
# ============================================================

async def update_order_status(
    order_id: str,
    order_status: Optional[str] = None,
    payment_status: Optional[str] = None,
) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Applies admin status changes.

    - delivered: payment logs marked success
    - paymentStatus change: payment logs follow it
    - cancelled: ordered quantities go back into stock, at most once per order

    Returns:
        (updated order, previous orderStatus)
    """
    orders = get_orders_collection()
    oid = to_object_id(order_id)
    order = await orders.find_one({"_id": oid}) if oid else None
    if not order:
        raise ResourceNotFoundError("Order not found")

    previous_status = order.get("orderStatus")
    updates: Dict[str, Any] = {"updatedAt": utc_now()}
    if order_status:
        updates["orderStatus"] = order_status
    if payment_status:
        updates["paymentStatus"] = payment_status

    updated = await orders.find_one_and_update(
        {"_id": oid},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )

    with LogContext(order_id=order_id):
        if order_status == "delivered" and previous_status != "delivered":
            await sync_payment_logs(oid, "success")
        elif payment_status:
            await sync_payment_logs(oid, LOG_STATUS_FOR_PAYMENT[payment_status])

        if order_status == "cancelled" and previous_status != "cancelled":
            # Stock goes back once per order, even if it is later reopened and cancelled again
            claimed = await orders.update_one(
                {"_id": oid, "stockRestored": {"$ne": True}},
                {"$set": {"stockRestored": True}}
            )
            if claimed.modified_count:
                await stock_service.restore_stock(order["items"])
                updated["stockRestored"] = True
                logger.info("Order cancelled, stock restored")
            else:
                logger.info("Order cancelled, stock already restored earlier")

        if order_status and order_status != previous_status:
            logger.info(f"Order status {previous_status} -> {order_status}")

    return updated, previous_status


async def get_payment_logs() -> List[Dict[str, Any]]:
    """
    Latest payment logs. Falls back to entries synthesized from recent
    orders when no log exists yet.
    """
    logs = await get_payment_logs_collection().find().sort("createdAt", DESCENDING).limit(PAYMENT_LOG_LIMIT).to_list(length=PAYMENT_LOG_LIMIT)

    if logs:
        await populate(logs, "user", get_users_collection(), USER_SUMMARY_FIELDS)
        await populate(logs, "order", get_orders_collection(), ("totalAmount", "orderStatus"))
        return logs

    orders = await get_orders_collection().find().sort("createdAt", DESCENDING).limit(PAYMENT_LOG_LIMIT).to_list(length=PAYMENT_LOG_LIMIT)
    await populate(orders, "user", get_users_collection(), USER_SUMMARY_FIELDS)

    return [
        {
            "_id": order["_id"],
            "order": {
                "_id": order["_id"],
                "totalAmount": order.get("totalAmount"),
                "orderStatus": order.get("orderStatus"),
            },
            "user": order.get("user"),
            "amount": order.get("totalAmount"),
            "currency": DEFAULT_CURRENCY,
            "paymentMethod": order.get("paymentMethod") or "COD",
            "paymentId": order.get("paymentId"),
            "status": order.get("paymentStatus") or "pending",
            "createdAt": order.get("createdAt"),
        }
        for order in orders
    ]


async def update_payment_log_status(log_id: Optional[str], status: Optional[str]) -> Dict[str, Any]:
    if not log_id or not status:
        raise BadRequestError("logId and status are required")

    if status not in PAYMENT_LOG_STATUSES:
        raise BadRequestError(f"Invalid status. Must be one of: {', '.join(PAYMENT_LOG_STATUSES)}")

    oid = to_object_id(log_id)
    log = await get_payment_logs_collection().find_one_and_update(
        {"_id": oid},
        {"$set": {"status": status, "updatedAt": utc_now()}},
        return_document=ReturnDocument.AFTER,
    ) if oid else None

    if not log:
        raise ResourceNotFoundError("Payment log not found")

    await populate([log], "user", get_users_collection(), USER_SUMMARY_FIELDS)
    await populate([log], "order", get_orders_collection(), ("totalAmount", "orderStatus"))
    return log
