"""
storefront/db/mongo.py

Purpose: MongoDB connection and collection access

- One Motor client per process, opened in the app lifespan
- Connect retries with exponential backoff
- Ping-based health check
- One accessor per collection
"""

import asyncio
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from storefront.core.config import settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None

CONNECT_ATTEMPTS = 3
INITIAL_RETRY_DELAY = 2

USERS = "users"
PRODUCTS = "products"
CATEGORIES = "categories"
CARTS = "carts"
WISHLISTS = "wishlists"
ADDRESSES = "addresses"
ORDERS = "orders"
REVIEWS = "reviews"
COUPONS = "coupons"
PAYMENT_LOGS = "payment_logs"
OFFERS = "offers"
TESTIMONIALS = "testimonials"
SHIPPING_SETTINGS = "shipping_settings"
ANALYTICS = "analytics"


def _new_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.MONGODB_URL,
        appname="storefront-api",
        maxPoolSize=50,
        minPoolSize=5,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        retryWrites=True,
        retryReads=True,
    )


async def connect_to_mongo():
    """
    Opens the shared client and verifies it with a ping.

    Raises:
        ConnectionError: every attempt failed
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    delay = INITIAL_RETRY_DELAY
    for attempt in range(1, CONNECT_ATTEMPTS + 1):
        client = _new_client()
        try:
            await client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            client.close()
            logger.error(f"MongoDB ping failed (attempt {attempt}/{CONNECT_ATTEMPTS}): {e}")
            if attempt == CONNECT_ATTEMPTS:
                logger.critical("Giving up on MongoDB")
                raise ConnectionError("Could not establish MongoDB connection") from e
            await asyncio.sleep(delay)
            delay *= 2
            continue

        _client = client
        _database = client[settings.MONGODB_DB_NAME]
        logger.info(f"✅ Connected to MongoDB database '{settings.MONGODB_DB_NAME}'")
        return


async def close_mongo_connection():
    global _client, _database

    if _client is None:
        return

    _client.close()
    _client = None
    _database = None
    logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    if _client is None:
        # Tests inject a database without a client
        return _database is not None

    try:
        await _client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def get_database() -> AsyncIOMotorDatabase:
    """
    Raises:
        RuntimeError: called before connect_to_mongo()
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")
    return _database


def get_collection(name: str) -> AsyncIOMotorCollection:
    return get_database()[name]


def get_users_collection():
    return get_collection(USERS)


def get_products_collection():
    return get_collection(PRODUCTS)


def get_categories_collection():
    return get_collection(CATEGORIES)


def get_carts_collection():
    return get_collection(CARTS)


def get_wishlists_collection():
    return get_collection(WISHLISTS)


def get_addresses_collection():
    return get_collection(ADDRESSES)


def get_orders_collection():
    return get_collection(ORDERS)


def get_reviews_collection():
    return get_collection(REVIEWS)


def get_coupons_collection():
    return get_collection(COUPONS)


def get_payment_logs_collection():
    return get_collection(PAYMENT_LOGS)


def get_offers_collection():
    return get_collection(OFFERS)


def get_testimonials_collection():
    return get_collection(TESTIMONIALS)


def get_shipping_settings_collection():
    return get_collection(SHIPPING_SETTINGS)


def get_analytics_collection():
    return get_collection(ANALYTICS)
