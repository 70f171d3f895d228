"""
storefront/api/coupons.py

Purpose: Coupon endpoints (public validation, admin management)
"""

from fastapi import APIRouter, Depends, status

from storefront.api.deps import require_admin
from storefront.schemas.orders import CouponCreateRequest, CouponValidateRequest
from storefront.services import coupon_service
from utils.serialization import serialize_doc

router = APIRouter()


@router.post("/validate")
async def validate_coupon(payload: CouponValidateRequest):
    return await coupon_service.validate_coupon(payload.code, payload.cart_total)


@router.get("", dependencies=[Depends(require_admin)])
async def list_coupons():
    coupons = await coupon_service.list_coupons()
    return {"success": True, "count": len(coupons), "coupons": serialize_doc(coupons)}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_coupon(payload: CouponCreateRequest):
    coupon = await coupon_service.create_coupon(
        code=payload.code,
        discount_type=payload.discount_type,
        discount_value=payload.discount_value,
        expiration_date=payload.expiration_date,
        min_purchase_amount=payload.min_purchase_amount,
        usage_limit=payload.usage_limit,
        is_active=payload.is_active,
    )
    return {
        "success": True,
        "message": "Coupon created successfully",
        "coupon": serialize_doc(coupon),
    }


@router.delete("/{coupon_id}", dependencies=[Depends(require_admin)])
async def delete_coupon(coupon_id: str):
    await coupon_service.delete_coupon(coupon_id)
    return {"success": True, "message": "Coupon deleted successfully"}
