"""
storefront/services/offer_service.py

Purpose: Promotional offer banners
"""

from typing import Any, Dict, List

from pymongo import ASCENDING

from storefront.core.exceptions import ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_offers_collection
from utils.constants import DEFAULT_OFFERS
from utils.serialization import to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)


async def list_active_offers() -> List[Dict[str, Any]]:
    return await get_offers_collection().find({"active": True}).sort("order", ASCENDING).to_list(length=None)


async def list_all_offers() -> List[Dict[str, Any]]:
    return await get_offers_collection().find().sort("order", ASCENDING).to_list(length=None)


async def get_offer(offer_id: str) -> Dict[str, Any]:
    oid = to_object_id(offer_id)
    offer = await get_offers_collection().find_one({"_id": oid}) if oid else None
    if not offer:
        raise ResourceNotFoundError("Offer not found")
    return offer


async def create_offer(data: Dict[str, Any]) -> Dict[str, Any]:
    now = utc_now()
    offer = dict(data, createdAt=now, updatedAt=now)
    result = await get_offers_collection().insert_one(offer)
    offer["_id"] = result.inserted_id
    return offer


async def update_offer(offer_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    offer = await get_offer(offer_id)
    updates = {key: value for key, value in data.items() if value is not None}
    updates["updatedAt"] = utc_now()

    await get_offers_collection().update_one({"_id": offer["_id"]}, {"$set": updates})
    offer.update(updates)
    return offer


async def delete_offer(offer_id: str):
    offer = await get_offer(offer_id)
    await get_offers_collection().delete_one({"_id": offer["_id"]})


async def seed_default_offers() -> bool:
    """
    Inserts the default offers into an empty collection.

    Returns:
        True if offers were inserted, False if some already existed
    """
    offers = get_offers_collection()
    if await offers.count_documents({}) > 0:
        return False

    now = utc_now()
    await offers.insert_many([dict(offer, createdAt=now, updatedAt=now) for offer in DEFAULT_OFFERS])
    logger.info(f"Seeded {len(DEFAULT_OFFERS)} default offer(s)")
    return True
