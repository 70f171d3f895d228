"""
storefront/api/addresses.py

Purpose: Address book endpoints (authenticated)
"""

from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_current_user
from storefront.schemas.shopping import AddressCreateRequest
from storefront.services import address_service
from utils.serialization import serialize_doc

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_address(payload: AddressCreateRequest, user: dict = Depends(get_current_user)):
    address = await address_service.add_address(user["id"], payload.model_dump(by_alias=True))
    return {"success": True, "address": serialize_doc(address)}


@router.get("")
async def list_addresses(user: dict = Depends(get_current_user)):
    addresses = await address_service.list_addresses(user["id"])
    return {"success": True, "addresses": serialize_doc(addresses)}


@router.put("/default/{address_id}")
async def set_default_address(address_id: str, user: dict = Depends(get_current_user)):
    await address_service.set_default_address(user["id"], address_id)
    return {"success": True, "message": "Default address updated"}


@router.delete("/{address_id}")
async def delete_address(address_id: str, user: dict = Depends(get_current_user)):
    await address_service.delete_address(user["id"], address_id)
    return {"success": True, "message": "Address deleted"}
