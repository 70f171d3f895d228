"""
storefront/api/shipping.py

Purpose: Shipping settings endpoints
"""

from fastapi import APIRouter, Depends

from storefront.api.deps import require_admin
from storefront.schemas.orders import ShippingSettingsRequest
from storefront.services import shipping_service
from utils.serialization import serialize_doc

router = APIRouter()


@router.get("")
async def get_shipping_settings():
    settings = await shipping_service.get_settings()
    return {"success": True, "settings": serialize_doc(settings)}


@router.post("")
async def update_shipping_settings(payload: ShippingSettingsRequest, user: dict = Depends(require_admin)):
    settings = await shipping_service.update_settings(
        updated_by=user["id"],
        shipping_cost=payload.shipping_cost,
        free_shipping_threshold=payload.free_shipping_threshold,
        threshold_provided="free_shipping_threshold" in payload.model_fields_set,
        description=payload.description,
        cod_enabled=payload.cod_enabled,
    )
    return {
        "success": True,
        "message": "Shipping settings updated successfully",
        "settings": serialize_doc(settings),
    }
