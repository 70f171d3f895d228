"""
storefront/api/wishlist.py

Purpose: Wishlist endpoints (authenticated)
"""

from fastapi import APIRouter, Depends

from storefront.api.deps import get_current_user
from storefront.schemas.shopping import WishlistItemRequest, WishlistMergeRequest
from storefront.services import wishlist_service
from utils.serialization import serialize_doc

router = APIRouter()


@router.post("/add")
async def add_to_wishlist(payload: WishlistItemRequest, user: dict = Depends(get_current_user)):
    wishlist, added = await wishlist_service.add_product(user["id"], payload.product_id)
    message = "Added to wishlist" if added else "Already in wishlist"
    return {"success": True, "message": message, "wishlist": serialize_doc(wishlist)}


@router.post("/remove")
async def remove_from_wishlist(payload: WishlistItemRequest, user: dict = Depends(get_current_user)):
    wishlist = await wishlist_service.remove_product(user["id"], payload.product_id)
    return {"success": True, "message": "Removed from wishlist", "wishlist": serialize_doc(wishlist)}


@router.get("")
async def get_wishlist(user: dict = Depends(get_current_user)):
    wishlist = await wishlist_service.get_wishlist(user["id"])
    return {"success": True, "wishlist": serialize_doc(wishlist)}


@router.post("/merge")
async def merge_wishlist(payload: WishlistMergeRequest, user: dict = Depends(get_current_user)):
    wishlist = await wishlist_service.merge_guest_wishlist(user["id"], payload.product_ids)
    return {"success": True, "message": "Wishlist merged", "wishlist": serialize_doc(wishlist)}
