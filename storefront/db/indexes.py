"""
storefront/db/indexes.py

Purpose: Database index management

- Creates unique and performance indexes
- Ensures fast lookups and data integrity
- TTL index for automatic analytics cleanup
"""

from pymongo import ASCENDING, DESCENDING

from storefront.db.mongo import (
    get_users_collection,
    get_products_collection,
    get_categories_collection,
    get_carts_collection,
    get_wishlists_collection,
    get_addresses_collection,
    get_orders_collection,
    get_reviews_collection,
    get_coupons_collection,
    get_payment_logs_collection,
    get_analytics_collection,
)
from storefront.core.logging import get_logger

logger = get_logger(__name__)

ANALYTICS_TTL_SECONDS = 604800  # 7 days


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        logger.info("Creating database indexes...")

        # ==============================================
        # USERS / CATALOG
        # ==============================================

        users = get_users_collection()
        await users.create_index("email", unique=True, name="email_unique")
        await users.create_index("resetPasswordToken", sparse=True, name="reset_token_idx")

        products = get_products_collection()
        await products.create_index("category", name="product_category_idx")
        await products.create_index("brand", name="product_brand_idx")
        await products.create_index("price", name="product_price_idx")
        await products.create_index("stock", name="product_stock_idx")
        await products.create_index([("createdAt", DESCENDING)], name="product_created_idx")

        categories = get_categories_collection()
        await categories.create_index("name", unique=True, name="category_name_unique")
        await categories.create_index("slug", unique=True, name="category_slug_unique")

        # ==============================================
        # SHOPPING
        # ==============================================

        await get_carts_collection().create_index("user", unique=True, name="cart_user_unique")
        await get_wishlists_collection().create_index("user", unique=True, name="wishlist_user_unique")
        await get_addresses_collection().create_index(
            [("user", ASCENDING), ("isDefault", DESCENDING)],
            name="address_user_default_idx"
        )

        # ==============================================
        # ORDERS / PAYMENTS
        # ==============================================

        orders = get_orders_collection()
        await orders.create_index(
            [("user", ASCENDING), ("createdAt", DESCENDING)],
            name="order_user_created_idx"
        )
        await orders.create_index(
            "idempotencyKey",
            unique=True,
            sparse=True,
            name="order_idempotency_unique"
        )
        await orders.create_index("razorpayOrderId", sparse=True, name="order_razorpay_idx")

        payment_logs = get_payment_logs_collection()
        await payment_logs.create_index("order", name="payment_log_order_idx")
        await payment_logs.create_index([("createdAt", DESCENDING)], name="payment_log_created_idx")

        await get_coupons_collection().create_index("code", unique=True, name="coupon_code_unique")

        # ==============================================
        # REVIEWS / ANALYTICS
        # ==============================================

        reviews = get_reviews_collection()
        await reviews.create_index("product", name="review_product_idx")
        await reviews.create_index(
            [("user", ASCENDING), ("product", ASCENDING)],
            unique=True,
            name="review_user_product_unique"
        )

        analytics = get_analytics_collection()
        await analytics.create_index("visitorId", name="analytics_visitor_idx")
        await analytics.create_index(
            "timestamp",
            expireAfterSeconds=ANALYTICS_TTL_SECONDS,
            name="analytics_ttl_idx"
        )

        logger.info("✅ All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create indexes manually.
    """
    import asyncio
    from storefront.db.mongo import connect_to_mongo, close_mongo_connection

    async def main():
        await connect_to_mongo()
        await create_indexes()
        await close_mongo_connection()

    asyncio.run(main())
