"""
storefront/api/health.py

Purpose: Liveness / readiness probes and service info
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from storefront.core.config import settings
from storefront.db.mongo import check_database_health

router = APIRouter()

APP_NAME = "Storefront API"
APP_VERSION = "1.0.0"


def _configured(flag: bool) -> str:
    return "configured" if flag else "not_configured"


@router.get("/")
async def root():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT,
    }


@router.get("/health")
async def health_check():
    """
    Database connectivity plus which integrations have credentials.
    Responds 503 when the database is unreachable.
    """
    db_healthy = await check_database_health()
    body = {
        "status": "healthy" if db_healthy else "degraded",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
            "razorpay": _configured(settings.razorpay_configured),
            "email": _configured(settings.email_configured),
            "cloudinary": _configured(settings.cloudinary_configured),
            "google_oauth": _configured(settings.google_oauth_configured),
        },
    }
    return JSONResponse(content=body, status_code=200 if db_healthy else 503)


@router.get("/ready")
async def readiness_check():
    if await check_database_health():
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "database_unavailable"})


@router.get("/live")
async def liveness_check():
    return {"status": "alive"}
