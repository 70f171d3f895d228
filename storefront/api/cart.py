"""
storefront/api/cart.py

Purpose: Shopping cart endpoints (authenticated)
"""

from fastapi import APIRouter, Depends

from storefront.api.deps import get_current_user
from storefront.schemas.shopping import CartItemRequest, CartMergeRequest, CartUpdateRequest
from storefront.services import cart_service
from utils.serialization import serialize_doc

router = APIRouter()


@router.post("/add")
async def add_to_cart(payload: CartItemRequest, user: dict = Depends(get_current_user)):
    cart = await cart_service.add_item(user["id"], payload.product_id, payload.quantity)
    return {"success": True, "message": "Cart updated", "cart": serialize_doc(cart)}


@router.get("")
async def get_cart(user: dict = Depends(get_current_user)):
    return serialize_doc(await cart_service.get_cart(user["id"]))


@router.put("/update")
async def update_quantity(payload: CartUpdateRequest, user: dict = Depends(get_current_user)):
    cart = await cart_service.update_quantity(user["id"], payload.product_id, payload.quantity)
    return {"success": True, "message": "Quantity updated", "cart": serialize_doc(cart)}


@router.delete("/remove/{product_id}")
async def remove_item(product_id: str, user: dict = Depends(get_current_user)):
    cart = await cart_service.remove_item(user["id"], product_id)
    return {"success": True, "message": "Item removed", "cart": serialize_doc(cart)}


@router.delete("/clear")
async def clear_cart(user: dict = Depends(get_current_user)):
    await cart_service.clear_cart(user["id"])
    return {"success": True, "message": "Cart cleared"}


@router.post("/merge")
async def merge_cart(payload: CartMergeRequest, user: dict = Depends(get_current_user)):
    guest_items = [{"productId": item.product_id, "quantity": item.quantity} for item in payload.items]
    cart = await cart_service.merge_guest_cart(user["id"], guest_items)
    return {"success": True, "message": "Cart merged", "cart": serialize_doc(cart)}
