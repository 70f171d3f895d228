"""
storefront/db/seed.py

Purpose: Initial data

- Admin account from ADMIN_EMAIL / ADMIN_PASSWORD
- Default offer banners when none exist
"""

from storefront.core.logging import get_logger
from storefront.services.offer_service import seed_default_offers
from storefront.services.user_service import ensure_admin_user

logger = get_logger(__name__)


async def seed_initial_data():
    """
    Idempotent; safe to run on every startup.
    """
    admin = await ensure_admin_user()
    if admin is None:
        logger.info("ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin seed")

    await seed_default_offers()
