"""
storefront/services/analytics_service.py

Purpose: Page-view tracking

- Records visits (visitor id, page, device, ip, user agent)
- Paginated log for admins
- 24-hour dashboard stats
"""

import math
from typing import Any, Dict, Optional

from pymongo import DESCENDING

from storefront.core.logging import get_logger
from storefront.db.mongo import get_analytics_collection, get_users_collection
from storefront.db.populate import populate
from utils.constants import ANALYTICS_PAGE_SIZE, USER_SUMMARY_FIELDS
from utils.serialization import to_object_id
from utils.time_utils import hours_ago, utc_now

logger = get_logger(__name__)


async def track_visit(
    visitor_id: str,
    page: str,
    device_type: str,
    ip: Optional[str],
    user_agent: Optional[str],
    user_id: Optional[str] = None,
):
    await get_analytics_collection().insert_one({
        "visitorId": visitor_id,
        "user": to_object_id(user_id) if user_id else None,
        "page": page,
        "ip": ip,
        "userAgent": user_agent,
        "deviceType": device_type,
        "timestamp": utc_now(),
    })


async def get_logs(page: int = 1) -> Dict[str, Any]:
    analytics = get_analytics_collection()
    logs = await (
        analytics.find({})
        .sort("timestamp", DESCENDING)
        .skip(ANALYTICS_PAGE_SIZE * (page - 1))
        .limit(ANALYTICS_PAGE_SIZE)
        .to_list(length=ANALYTICS_PAGE_SIZE)
    )
    count = await analytics.count_documents({})
    await populate(logs, "user", get_users_collection(), USER_SUMMARY_FIELDS)

    return {
        "success": True,
        "logs": logs,
        "page": page,
        "pages": math.ceil(count / ANALYTICS_PAGE_SIZE),
        "totalLogs": count,
    }


async def get_stats() -> Dict[str, Any]:
    analytics = get_analytics_collection()
    since = {"$gte": hours_ago(24)}

    total_visits = await analytics.count_documents({"timestamp": since})
    unique_visitors = await analytics.distinct("visitorId", {"timestamp": since})
    mobile = await analytics.count_documents({"deviceType": "mobile", "timestamp": since})
    desktop = await analytics.count_documents({"deviceType": "desktop", "timestamp": since})

    return {
        "success": True,
        "totalVisits24h": total_visits,
        "uniqueVisitors24h": len(unique_visitors),
        "deviceSplit": {"mobile": mobile, "desktop": desktop},
    }
