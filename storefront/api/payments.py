"""
storefront/api/payments.py

Purpose: Razorpay endpoints

- Create a gateway order for the checkout widget
- Verify the checkout signature and place the paid order
- Payment lookup
- Webhook receiver (raw body, signed)
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request
from typing import Optional

from storefront.api.deps import get_current_user
from storefront.core.logging import get_logger
from storefront.schemas.orders import CreatePaymentOrderRequest, VerifyPaymentRequest
from storefront.services import payment_service
from storefront.services.email_service import notify_order_confirmation
from utils.serialization import serialize_doc

logger = get_logger(__name__)
router = APIRouter()


@router.post("/create-order")
async def create_order(payload: CreatePaymentOrderRequest, user: dict = Depends(get_current_user)):
    return await payment_service.create_payment_order(user["id"], payload.amount)


@router.post("/verify-payment")
async def verify_payment(
    payload: VerifyPaymentRequest,
    background_tasks: BackgroundTasks,
    user: dict = Depends(get_current_user),
):
    order, created = await payment_service.verify_and_place_order(
        user_id=user["id"],
        razorpay_order_id=payload.razorpay_order_id,
        razorpay_payment_id=payload.razorpay_payment_id,
        razorpay_signature=payload.razorpay_signature,
        selected_address_id=payload.selected_address_id,
        coupon_code=payload.coupon_code,
    )

    if created:
        background_tasks.add_task(notify_order_confirmation, user["id"], str(order["_id"]))

    return {
        "success": True,
        "message": "Payment verified, order created",
        "orderId": str(order["_id"]),
        "order": serialize_doc(order),
    }


@router.get("/payment/{payment_id}")
async def get_payment(payment_id: str, user: dict = Depends(get_current_user)):
    payment = await payment_service.get_payment_details(payment_id)
    return {"success": True, "payment": payment}


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_razorpay_signature: Optional[str] = Header(None),
):
    body = await request.body()
    order = await payment_service.handle_webhook(body, x_razorpay_signature)

    if order is not None:
        background_tasks.add_task(notify_order_confirmation, str(order["user"]), str(order["_id"]))

    return {"status": "ok"}
