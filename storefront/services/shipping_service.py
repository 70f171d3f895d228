"""
storefront/services/shipping_service.py

Purpose: Store-wide shipping settings

- Singleton settings document with defaults
- Shipping cost for a given subtotal
"""

from typing import Any, Dict, Optional

from storefront.core.exceptions import BadRequestError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_shipping_settings_collection
from utils.constants import DEFAULT_SHIPPING_SETTINGS
from utils.serialization import to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)


async def get_settings() -> Dict[str, Any]:
    stored = await get_shipping_settings_collection().find_one({})
    settings = dict(DEFAULT_SHIPPING_SETTINGS)
    if stored:
        settings.update(stored)
    return settings


def compute_shipping_cost(subtotal: float, settings: Dict[str, Any]) -> float:
    """
    Flat shipping cost, waived when the subtotal reaches the free-shipping threshold.
    """
    threshold = settings.get("freeShippingThreshold")
    if threshold is not None and subtotal >= threshold:
        return 0
    return settings.get("shippingCost") or 0


async def update_settings(
    updated_by: str,
    shipping_cost: Optional[float] = None,
    free_shipping_threshold: Optional[float] = None,
    threshold_provided: bool = False,
    description: Optional[str] = None,
    cod_enabled: Optional[bool] = None,
) -> Dict[str, Any]:
    """
    Upserts the singleton. threshold_provided distinguishes an explicit null
    (remove the threshold) from an omitted field.
    """
    if shipping_cost is not None and shipping_cost < 0:
        raise BadRequestError("Shipping cost must be a non-negative number")

    if free_shipping_threshold is not None and free_shipping_threshold < 0:
        raise BadRequestError("Free shipping threshold must be a non-negative number or null")

    updates: Dict[str, Any] = {
        "lastUpdatedBy": to_object_id(updated_by),
        "updatedAt": utc_now(),
    }
    if shipping_cost is not None:
        updates["shippingCost"] = shipping_cost
    if threshold_provided:
        updates["freeShippingThreshold"] = free_shipping_threshold
    if description is not None:
        updates["description"] = description
    if cod_enabled is not None:
        updates["codEnabled"] = cod_enabled

    collection = get_shipping_settings_collection()
    existing = await collection.find_one({})
    if existing:
        await collection.update_one({"_id": existing["_id"]}, {"$set": updates})
    else:
        document = dict(DEFAULT_SHIPPING_SETTINGS)
        document.update(updates)
        document["createdAt"] = updates["updatedAt"]
        await collection.insert_one(document)

    logger.info("Shipping settings updated", extra={"user_id": updated_by})
    return await get_settings()
