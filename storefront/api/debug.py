"""
storefront/api/debug.py

Purpose: Diagnostics (only mounted outside production)

- Sends a test e-mail and reports e-mail configuration
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter

from storefront.core.config import settings
from storefront.services import email_templates
from storefront.services.email_service import send_email

router = APIRouter()


@router.get("/email")
async def test_email(email: Optional[str] = None):
    target = email or settings.SUPPORT_EMAIL
    env_check = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "resendConfigured": settings.email_configured,
        "fromAddress": settings.RESEND_FROM_EMAIL,
        "supportEmail": settings.SUPPORT_EMAIL,
        "environment": settings.ENVIRONMENT,
    }

    result = await send_email(
        to=target,
        subject="Test Email - Debug Endpoint",
        html=email_templates.debug_html(env_check),
    )

    return {
        "success": result is not None,
        "message": f"Email sent to {target}" if result is not None else "Email not sent",
        "data": result,
        "envCheck": env_check,
    }
