"""
storefront/api/contact.py

Purpose: Contact form relay
"""

from fastapi import APIRouter

from storefront.core.config import settings
from storefront.core.exceptions import BadRequestError, StorefrontError
from storefront.core.logging import get_logger
from storefront.schemas.content import ContactRequest
from storefront.services.email_service import send_contact_emails

logger = get_logger(__name__)
router = APIRouter()


@router.post("/send-email")
async def send_contact_email(payload: ContactRequest):
    if not all([payload.name, payload.email, payload.subject, payload.message]):
        raise BadRequestError("All fields are required")

    if not settings.email_configured:
        logger.warning("Email service not configured, contact form not relayed")
        return {
            "success": True,
            "message": "Thank you for your message. We will contact you soon.",
            "warning": "Email service not configured",
        }

    try:
        await send_contact_emails(payload.name, payload.email, payload.subject, payload.message)
    except StorefrontError:
        raise StorefrontError("Failed to send email", code="EMAIL_SEND_FAILED", status_code=500)

    return {"success": True, "message": "Email sent successfully"}
