"""
storefront/services/payment_service.py

Purpose: Razorpay integration

- REST client for orders and payments (basic auth over httpx)
- Checkout signature verification (HMAC-SHA256 of "order_id|payment_id")
- Webhook signature verification and payment.captured handling
"""

import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional, Tuple

import httpx

from storefront.core.config import settings
from storefront.core.exceptions import BadRequestError, PaymentGatewayError
from storefront.core.logging import get_logger, LogContext
from storefront.db.mongo import get_orders_collection
from storefront.services import order_service
from utils.constants import DEFAULT_CURRENCY
from utils.serialization import is_valid_object_id, to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)


class RazorpayClient:
    """
    Minimal async client for the Razorpay REST API.
    """

    def __init__(self, key_id: str, key_secret: str, base_url: str = settings.RAZORPAY_BASE_URL, timeout: float = settings.RAZORPAY_TIMEOUT):
        self.key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.key_id, self._key_secret),
                timeout=self._timeout,
            ) as client:
                response = await client.request(method, path, json=payload)

            if response.status_code >= 400:
                try:
                    error = response.json().get("error", {})
                except ValueError:
                    error = {}
                description = error.get("description") or response.text[:200]
                logger.error(f"Razorpay {method} {path} failed ({response.status_code}): {description}")
                raise PaymentGatewayError(f"Razorpay error: {description}", details=error or None)

            return response.json()

        except httpx.TimeoutException:
            logger.error(f"Razorpay timeout on {method} {path}")
            raise PaymentGatewayError("Payment gateway is taking too long to respond")
        except httpx.RequestError as e:
            logger.error(f"Razorpay connection error on {method} {path}: {str(e)}")
            raise PaymentGatewayError("Unable to reach payment gateway")

    async def create_order(self, amount: int, currency: str, receipt: str, notes: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return await self._request("POST", "/orders", {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        })

    async def fetch_order(self, razorpay_order_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/orders/{razorpay_order_id}")

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")


def get_razorpay_client() -> RazorpayClient:
    if not settings.razorpay_configured:
        raise BadRequestError("Razorpay is not configured. Please contact support.")
    return RazorpayClient(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(razorpay_order_id: str, razorpay_payment_id: str, signature: str, secret: Optional[str] = None) -> bool:
    """
    Checks the checkout callback signature in constant time.
    """
    secret = secret or settings.RAZORPAY_KEY_SECRET
    if not secret or not signature:
        return False
    expected = _hmac_hex(secret, f"{razorpay_order_id}|{razorpay_payment_id}".encode("utf-8"))
    return hmac.compare_digest(expected, signature)


def verify_webhook_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(_hmac_hex(secret, body), signature)


async def create_payment_order(user_id: str, amount: Optional[float]) -> Dict[str, Any]:
    client = get_razorpay_client()

    if not amount or amount <= 0:
        raise BadRequestError("Invalid amount")

    rp_order = await client.create_order(
        amount=round(amount * 100),
        currency=DEFAULT_CURRENCY,
        receipt=f"order_{int(time.time() * 1000)}",
        notes={"userId": user_id},
    )
    logger.info(f"💳 Razorpay order created: {rp_order.get('id')}", extra={"user_id": user_id})

    return {
        "success": True,
        "orderId": rp_order["id"],
        "amount": rp_order["amount"],
        "currency": rp_order["currency"],
        "keyId": client.key_id,
    }


async def verify_and_place_order(
    user_id: str,
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
    selected_address_id: str,
    coupon_code: Optional[str] = None,
) -> Tuple[Dict[str, Any], bool]:
    """
    Verifies the checkout signature, then runs the cart -> order pipeline
    as a paid Razorpay order. The Razorpay order id doubles as the
    idempotency key, so a repeated verify returns the same order.
    """
    get_razorpay_client()

    if not verify_payment_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
        logger.warning("Payment verification failed (signature mismatch)", extra={"user_id": user_id})
        raise BadRequestError("Payment verification failed (signature mismatch)")

    return await order_service.place_order(
        user_id=user_id,
        address_id=selected_address_id,
        payment_method="Razorpay",
        payment_id=razorpay_payment_id,
        coupon_code=coupon_code,
        idempotency_key=f"razorpay:{razorpay_order_id}",
        payment_status="paid",
        razorpay_order_id=razorpay_order_id,
        provider_response={"razorpay_order_id": razorpay_order_id},
    )


async def get_payment_details(payment_id: str) -> Dict[str, Any]:
    return await get_razorpay_client().fetch_payment(payment_id)


async def _find_order_for_payment(payment: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    orders = get_orders_collection()
    rp_order_id = payment.get("order_id")

    if rp_order_id:
        order = await orders.find_one({"razorpayOrderId": rp_order_id})
        if order:
            return order

    # Older checkouts put our order id in the Razorpay receipt
    if rp_order_id and settings.razorpay_configured:
        rp_order = await get_razorpay_client().fetch_order(rp_order_id)
        receipt = rp_order.get("receipt")
        if is_valid_object_id(receipt):
            return await orders.find_one({"_id": to_object_id(receipt)})
    return None


def _dict_at(payload: Dict[str, Any], *path: str) -> Dict[str, Any]:
    """
    Walks nested webhook objects. Missing levels read as {}; anything that
    is present but not an object is a malformed payload.
    """
    node = payload
    for key in path:
        node = node.get(key)
        if node is None:
            return {}
        if not isinstance(node, dict):
            raise BadRequestError("Invalid webhook payload")
    return node


async def handle_webhook(body: bytes, signature: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Processes a Razorpay webhook delivery.

    Returns:
        The order that was newly marked paid (so the caller can e-mail the
        customer), or None when nothing changed

    Raises:
        BadRequestError: bad signature or malformed payload
    """
    if settings.RAZORPAY_WEBHOOK_SECRET:
        if not verify_webhook_signature(body, signature, settings.RAZORPAY_WEBHOOK_SECRET):
            logger.warning("Invalid webhook signature")
            raise BadRequestError("invalid signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise BadRequestError("Invalid webhook payload")
    if not isinstance(payload, dict):
        raise BadRequestError("Invalid webhook payload")

    event = payload.get("event")
    logger.info(f"📩 Razorpay webhook received: {event}")

    if event != "payment.captured":
        return None

    payment = _dict_at(payload, "payload", "payment", "entity")
    order = await _find_order_for_payment(payment)
    if not order:
        logger.warning(f"No order matches captured payment {payment.get('id')}")
        return None

    with LogContext(order_id=str(order["_id"])):
        # Conditional update makes repeated deliveries no-ops
        result = await get_orders_collection().update_one(
            {"_id": order["_id"], "paymentStatus": {"$ne": "paid"}},
            {"$set": {
                "paymentStatus": "paid",
                "paymentMethod": "Razorpay",
                "paymentId": payment.get("id"),
                "updatedAt": utc_now(),
            }}
        )
        if result.modified_count == 0:
            logger.info("Webhook replay ignored, order already paid")
            return None

        order["paymentStatus"] = "paid"
        await order_service.create_payment_log(
            order["user"], order, "Razorpay", "success",
            payment_id=payment.get("id"), provider_response=payment
        )
        logger.info("✅ Order marked paid from webhook")
        return order
