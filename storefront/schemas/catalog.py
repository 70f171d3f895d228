"""
storefront/schemas/catalog.py

Purpose: Catalog request payloads

- Category create / update
- Product stock updates
- Review submission
"""

from typing import Optional

from pydantic import BaseModel, Field

from storefront.schemas.base import CamelModel


class CategoryCreateRequest(BaseModel):
    name: Optional[str] = None
    image: Optional[str] = None


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = None
    image: Optional[str] = None


class StockUpdateRequest(BaseModel):
    stock: Optional[int] = None


class ReviewCreateRequest(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
