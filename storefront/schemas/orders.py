"""
storefront/schemas/orders.py

Purpose: Checkout, payment and coupon payloads

- Order placement and admin status updates
- Razorpay order creation and verification
- Coupon validation and creation
- Shipping settings
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.schemas.base import CamelModel
from utils.constants import ORDER_STATUSES, PAYMENT_STATUSES


class PlaceOrderRequest(CamelModel):
    selected_address_id: str
    payment_method: Literal["COD", "Stripe", "Razorpay", "PayPal"] = "COD"
    payment_id: Optional[str] = None
    coupon_code: Optional[str] = None


class OrderStatusUpdateRequest(CamelModel):
    order_status: Optional[str] = None
    payment_status: Optional[str] = None

    @field_validator("order_status")
    @classmethod
    def validate_order_status(cls, v):
        if v is not None and v not in ORDER_STATUSES:
            raise ValueError(f"orderStatus must be one of: {', '.join(ORDER_STATUSES)}")
        return v

    @field_validator("payment_status")
    @classmethod
    def validate_payment_status(cls, v):
        if v is not None and v not in PAYMENT_STATUSES:
            raise ValueError(f"paymentStatus must be one of: {', '.join(PAYMENT_STATUSES)}")
        return v


class PaymentLogStatusRequest(CamelModel):
    log_id: Optional[str] = None
    status: Optional[str] = None


class CreatePaymentOrderRequest(BaseModel):
    amount: Optional[float] = None


class VerifyPaymentRequest(BaseModel):
    """
    Razorpay checkout callback fields are snake_case; the address id comes
    from the SPA in camelCase.
    """
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    selected_address_id: str = Field(..., alias="selectedAddressId")
    coupon_code: Optional[str] = Field(None, alias="couponCode")

    model_config = {"populate_by_name": True}


class CouponValidateRequest(CamelModel):
    code: Optional[str] = None
    cart_total: float = 0


class CouponCreateRequest(CamelModel):
    code: Optional[str] = None
    discount_type: Optional[Literal["PERCENTAGE", "FIXED"]] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_purchase_amount: float = Field(default=0, ge=0)
    expiration_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=1)
    is_active: bool = True


class ShippingSettingsRequest(CamelModel):
    shipping_cost: Optional[float] = None
    free_shipping_threshold: Optional[float] = None
    description: Optional[str] = None
    cod_enabled: Optional[bool] = None
