"""
storefront/api/orders.py

Purpose: Order endpoints

- Checkout from the cart (idempotent with an Idempotency-Key header)
- Customer order history and detail
- Admin order list, status updates and payment logs
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Response, status

from storefront.api.deps import get_current_user, require_admin
from storefront.core.logging import get_logger
from storefront.schemas.orders import (
    OrderStatusUpdateRequest,
    PaymentLogStatusRequest,
    PlaceOrderRequest,
)
from storefront.services import order_service
from storefront.services.email_service import notify_order_confirmation, notify_order_status
from utils.serialization import serialize_doc

logger = get_logger(__name__)
router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: PlaceOrderRequest,
    background_tasks: BackgroundTasks,
    response: Response,
    user: dict = Depends(get_current_user),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    order, created = await order_service.place_order(
        user_id=user["id"],
        address_id=payload.selected_address_id,
        payment_method=payload.payment_method,
        payment_id=payload.payment_id,
        coupon_code=payload.coupon_code,
        idempotency_key=idempotency_key,
    )

    if created:
        background_tasks.add_task(notify_order_confirmation, user["id"], str(order["_id"]))
    else:
        response.status_code = status.HTTP_200_OK

    return {"success": True, "order": serialize_doc(order)}


@router.get("/my-orders")
async def my_orders(user: dict = Depends(get_current_user)):
    orders = await order_service.get_my_orders(user["id"])
    return {"success": True, "orders": serialize_doc(orders)}


@router.get("/logs", dependencies=[Depends(require_admin)])
async def payment_logs():
    logs = await order_service.get_payment_logs()
    return {"success": True, "logs": serialize_doc(logs)}


@router.post("/logs/update-status", dependencies=[Depends(require_admin)])
async def update_payment_log_status(payload: PaymentLogStatusRequest):
    log = await order_service.update_payment_log_status(payload.log_id, payload.status)
    return {"success": True, "message": "Payment log updated", "log": serialize_doc(log)}


@router.get("", dependencies=[Depends(require_admin)])
async def all_orders():
    orders = await order_service.list_all_orders()
    return {"success": True, "orders": serialize_doc(orders)}


@router.get("/{order_id}")
async def get_order(order_id: str, user: dict = Depends(get_current_user)):
    order = await order_service.get_order(order_id, user)
    return {"success": True, "order": serialize_doc(order)}


@router.put("/{order_id}", dependencies=[Depends(require_admin)])
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdateRequest,
    background_tasks: BackgroundTasks,
):
    order, previous_status = await order_service.update_order_status(
        order_id, payload.order_status, payload.payment_status
    )

    if payload.order_status and payload.order_status != previous_status:
        background_tasks.add_task(
            notify_order_status, str(order["user"]), order_id, payload.order_status
        )

    return {"success": True, "order": serialize_doc(order)}
