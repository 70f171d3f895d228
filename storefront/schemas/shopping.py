"""
storefront/schemas/shopping.py

Purpose: Cart, wishlist and address payloads

- Cart line add / update and guest-cart merge
- Wishlist add / remove and guest-wishlist merge
- Address book entries
"""

from typing import List, Optional

from pydantic import Field

from storefront.schemas.base import CamelModel


class CartItemRequest(CamelModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartUpdateRequest(CamelModel):
    product_id: str
    quantity: int


class GuestCartItem(CamelModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartMergeRequest(CamelModel):
    items: List[GuestCartItem] = Field(default_factory=list)


class WishlistItemRequest(CamelModel):
    product_id: str


class WishlistMergeRequest(CamelModel):
    product_ids: List[str] = Field(default_factory=list)


class AddressCreateRequest(CamelModel):
    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = "India"
    postal_code: str = Field(..., min_length=1)
    is_default: Optional[bool] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "fullName": "Asha Rao",
                "phone": "9876543210",
                "street": "12 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "postalCode": "560001",
            }
        }
    }
