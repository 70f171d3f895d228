"""
storefront/api/analytics.py

Purpose: Visitor tracking and admin analytics endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from storefront.api.deps import get_optional_user, require_admin
from storefront.schemas.content import TrackVisitRequest
from storefront.services import analytics_service
from utils.serialization import serialize_doc

router = APIRouter()


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/track", status_code=status.HTTP_201_CREATED)
async def track_visit(
    payload: TrackVisitRequest,
    request: Request,
    user: Optional[dict] = Depends(get_optional_user),
):
    await analytics_service.track_visit(
        visitor_id=payload.visitor_id,
        page=payload.page,
        device_type=payload.device_type,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        user_id=user["id"] if user else None,
    )
    return {"success": True}


@router.get("/logs", dependencies=[Depends(require_admin)])
async def analytics_logs(page_number: int = Query(1, ge=1, alias="pageNumber")):
    return serialize_doc(await analytics_service.get_logs(page_number))


@router.get("/stats", dependencies=[Depends(require_admin)])
async def analytics_stats():
    return await analytics_service.get_stats()
