"""
storefront/schemas/content.py

Purpose: Storefront content, analytics and contact payloads
"""

from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from storefront.schemas.base import CamelModel


class OfferCreateRequest(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    badge: Optional[str] = None
    background_color: str = "bg-gradient-to-r from-blue-500 to-blue-600"
    icon: bool = True
    active: bool = True
    order: int = 0


class OfferUpdateRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    badge: Optional[str] = None
    background_color: Optional[str] = None
    icon: Optional[bool] = None
    active: Optional[bool] = None
    order: Optional[int] = None


class TrackVisitRequest(CamelModel):
    visitor_id: str = Field(..., min_length=1)
    page: str = Field(..., min_length=1)
    device_type: Literal["mobile", "desktop", "tablet", "unknown"] = "unknown"


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    subject: Optional[str] = None
    message: Optional[str] = None
