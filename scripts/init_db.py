"""
Database initialization script

Run once against a fresh database to create indexes, the admin account
and the default offer banners:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from storefront.core.config import settings
from storefront.core.logging import setup_logging, get_logger
from storefront.db.mongo import connect_to_mongo, close_mongo_connection, get_database
from storefront.db.indexes import create_indexes
from storefront.db.seed import seed_initial_data

setup_logging()
logger = get_logger(__name__)


async def main():
    logger.info(f"🔌 Connecting to MongoDB: {settings.MONGODB_DB_NAME}")
    await connect_to_mongo()

    try:
        await create_indexes()
        await seed_initial_data()

        collections = await get_database().list_collection_names()
        logger.info(f"📋 Collections: {', '.join(sorted(collections))}")
        logger.info("✅ Database initialized")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
