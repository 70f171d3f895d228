"""
storefront/services/address_service.py

Purpose: Customer address book

- First address becomes the default
- Exactly one default per user while any address exists
"""

from typing import Any, Dict, List

from pymongo import ASCENDING, DESCENDING

from storefront.core.exceptions import ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_addresses_collection
from utils.serialization import to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)

ADDRESS_FIELDS = ("fullName", "phone", "street", "city", "state", "country", "postalCode")


async def add_address(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    addresses = get_addresses_collection()
    user_oid = to_object_id(user_id)

    has_any = await addresses.count_documents({"user": user_oid}) > 0
    make_default = not has_any or bool(data.get("isDefault"))

    if make_default and has_any:
        await addresses.update_many({"user": user_oid}, {"$set": {"isDefault": False}})

    now = utc_now()
    address = {field: data.get(field) for field in ADDRESS_FIELDS}
    address.update({
        "user": user_oid,
        "isDefault": make_default,
        "createdAt": now,
        "updatedAt": now,
    })

    result = await addresses.insert_one(address)
    address["_id"] = result.inserted_id
    return address


async def list_addresses(user_id: str) -> List[Dict[str, Any]]:
    cursor = get_addresses_collection().find({"user": to_object_id(user_id)}).sort(
        [("isDefault", DESCENDING), ("createdAt", DESCENDING)]
    )
    return await cursor.to_list(length=None)


async def get_user_address(user_id: str, address_id: str):
    oid = to_object_id(address_id)
    if oid is None:
        return None
    return await get_addresses_collection().find_one({"_id": oid, "user": to_object_id(user_id)})


async def set_default_address(user_id: str, address_id: str):
    address = await get_user_address(user_id, address_id)
    if not address:
        raise ResourceNotFoundError("Address not found")

    addresses = get_addresses_collection()
    await addresses.update_many({"user": address["user"]}, {"$set": {"isDefault": False}})
    await addresses.update_one({"_id": address["_id"]}, {"$set": {"isDefault": True, "updatedAt": utc_now()}})


async def delete_address(user_id: str, address_id: str):
    addresses = get_addresses_collection()
    address = await get_user_address(user_id, address_id)
    if not address:
        raise ResourceNotFoundError("Address not found")

    await addresses.delete_one({"_id": address["_id"]})

    if address.get("isDefault"):
        oldest = await addresses.find_one({"user": address["user"]}, sort=[("createdAt", ASCENDING)])
        if oldest:
            await addresses.update_one({"_id": oldest["_id"]}, {"$set": {"isDefault": True}})
            logger.debug("Promoted oldest address to default", extra={"user_id": user_id})
