"""
storefront/api/reviews.py

Purpose: Product review endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from storefront.api.deps import get_current_user
from storefront.schemas.catalog import ReviewCreateRequest
from storefront.services import review_service
from utils.serialization import serialize_doc

router = APIRouter()


@router.post("/{product_id}", status_code=status.HTTP_201_CREATED)
async def add_review(product_id: str, payload: ReviewCreateRequest, user: dict = Depends(get_current_user)):
    review = await review_service.add_review(user["id"], product_id, payload.rating, payload.comment)
    return {
        "success": True,
        "message": "Review added successfully",
        "review": serialize_doc(review),
    }


@router.get("/{product_id}")
async def list_reviews(
    product_id: str,
    sort: str = "latest",
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1, le=50),
):
    result = await review_service.list_reviews(product_id, sort=sort, rating=rating, page=page, limit=limit)
    return serialize_doc(result)


@router.delete("/{review_id}")
async def delete_review(review_id: str, user: dict = Depends(get_current_user)):
    await review_service.delete_review(user["id"], review_id)
    return {"success": True, "message": "Review deleted"}
