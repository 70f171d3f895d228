"""
storefront/services/review_service.py

Purpose: Product reviews

- One review per user per product
- Product averageRating / numReviews kept in sync
- Sorted, filtered, paginated listing
"""

import math
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from storefront.core.exceptions import BadRequestError, ResourceNotFoundError
from storefront.core.logging import get_logger
from storefront.db.mongo import get_products_collection, get_reviews_collection, get_users_collection
from storefront.db.populate import populate
from utils.constants import REVIEW_SORTS
from utils.serialization import to_object_id
from utils.time_utils import utc_now

logger = get_logger(__name__)


async def refresh_product_rating(product_oid):
    """
    Recomputes averageRating and numReviews from the stored reviews.
    """
    ratings = [
        review["rating"]
        async for review in get_reviews_collection().find({"product": product_oid}, {"rating": 1})
    ]
    average = round(sum(ratings) / len(ratings), 2) if ratings else 0

    await get_products_collection().update_one(
        {"_id": product_oid},
        {"$set": {"averageRating": average, "numReviews": len(ratings)}}
    )


async def add_review(user_id: str, product_id: str, rating: int, comment: Optional[str]) -> Dict[str, Any]:
    product_oid = to_object_id(product_id)
    if product_oid is None or not await get_products_collection().find_one({"_id": product_oid}, {"_id": 1}):
        raise ResourceNotFoundError("Product not found")

    reviews = get_reviews_collection()
    user_oid = to_object_id(user_id)
    if await reviews.find_one({"user": user_oid, "product": product_oid}):
        raise BadRequestError("You have already reviewed this product.")

    now = utc_now()
    review = {
        "user": user_oid,
        "product": product_oid,
        "rating": rating,
        "comment": (comment or "").strip(),
        "helpfulVotes": 0,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        result = await reviews.insert_one(review)
    except DuplicateKeyError:
        raise BadRequestError("You have already reviewed this product.")

    review["_id"] = result.inserted_id
    await refresh_product_rating(product_oid)
    logger.info("Review added", extra={"user_id": user_id, "product_id": product_id})
    return review


async def list_reviews(
    product_id: str,
    sort: str = "latest",
    rating: Optional[int] = None,
    page: int = 1,
    limit: int = 5,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {"product": to_object_id(product_id)}
    if rating:
        query["rating"] = rating

    reviews = get_reviews_collection()
    cursor = (
        reviews.find(query)
        .sort(REVIEW_SORTS.get(sort, REVIEW_SORTS["latest"]))
        .skip((page - 1) * limit)
        .limit(limit)
    )
    items = await cursor.to_list(length=limit)
    total = await reviews.count_documents(query)

    await populate(items, "user", get_users_collection(), ("name",))

    return {
        "success": True,
        "reviews": items,
        "pagination": {
            "page": page,
            "pages": math.ceil(total / limit) if limit else 0,
            "total": total,
        },
    }


async def delete_review(user_id: str, review_id: str):
    oid = to_object_id(review_id)
    reviews = get_reviews_collection()
    review = await reviews.find_one({"_id": oid, "user": to_object_id(user_id)}) if oid else None
    if not review:
        raise ResourceNotFoundError("Review not found")

    await reviews.delete_one({"_id": review["_id"]})
    await refresh_product_rating(review["product"])
