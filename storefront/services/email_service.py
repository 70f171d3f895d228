"""
storefront/services/email_service.py

Purpose: Transactional e-mail via Resend

- Order confirmation and status updates
- Password reset links
- Contact form relay
- Skips sending (with a warning) when no API key is configured
"""

import asyncio
from typing import Any, Dict, List, Optional, Union

import resend

from storefront.core.config import settings
from storefront.core.exceptions import ExternalServiceError
from storefront.core.logging import get_logger, LogContext
from storefront.db.mongo import get_orders_collection, get_products_collection, get_users_collection
from storefront.db.populate import populate_items
from storefront.services import email_templates
from utils.serialization import to_object_id

logger = get_logger(__name__)


def _from_address() -> str:
    # Dashboard-entered values sometimes arrive wrapped in quotes
    return settings.RESEND_FROM_EMAIL.replace('"', "").replace("'", "").strip()


async def send_email(
    to: Union[str, List[str]],
    subject: str,
    html: str,
    reply_to: Optional[str] = None,
    raise_on_error: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Sends one e-mail through Resend in a worker thread.

    Returns the Resend response, or None when e-mail is not configured or
    sending failed. With raise_on_error, failures raise ExternalServiceError
    instead of being logged and dropped.
    """
    if not settings.email_configured:
        logger.warning(f"⚠️ Resend API key not configured. Skipping email: {subject}")
        return None

    resend.api_key = settings.RESEND_API_KEY
    params = {
        "from": _from_address(),
        "to": to if isinstance(to, list) else [to],
        "subject": subject,
        "html": html,
    }
    if reply_to:
        params["reply_to"] = reply_to

    try:
        result = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"📧 Email sent to {to}: {subject}")
        return result
    except Exception as e:
        logger.error(f"❌ Failed to send email to {to}: {str(e)}")
        if raise_on_error:
            raise ExternalServiceError("Email could not be sent") from e
        return None


async def send_order_confirmation_email(user: Dict[str, Any], order: Dict[str, Any]):
    if not user or not user.get("email"):
        logger.error("Order confirmation skipped: user has no email")
        return None

    return await send_email(
        to=user["email"],
        subject=f"Order Confirmation - Order #{order['_id']}",
        html=email_templates.order_confirmation_html(order, settings.FRONTEND_URL),
        reply_to=settings.SUPPORT_EMAIL,
    )


async def send_order_status_email(email: str, order: Dict[str, Any], status: str):
    return await send_email(
        to=email,
        subject=f"Order Status Update - Order #{order['_id']}",
        html=email_templates.order_status_html(order, status),
    )


async def send_password_reset_email(user: Dict[str, Any], reset_url: str):
    """
    Unlike order mail, a failed send here surfaces to the caller.
    """
    return await send_email(
        to=user["email"],
        subject="Password Reset Request",
        html=email_templates.password_reset_html(user.get("name", ""), reset_url),
        raise_on_error=True,
    )


async def send_contact_emails(name: str, email: str, subject: str, message: str):
    await send_email(
        to=settings.SUPPORT_EMAIL,
        subject=f"New Contact Form Submission: {subject}",
        html=email_templates.contact_support_html(name, email, subject, message),
        reply_to=email,
        raise_on_error=True,
    )
    await send_email(
        to=email,
        subject=f"We received your message - {email_templates.BRAND_NAME}",
        html=email_templates.contact_confirmation_html(name, message),
        raise_on_error=True,
    )


# ============================================================
# BACKGROUND NOTIFICATIONS
# ============================================================

async def notify_order_confirmation(user_id: str, order_id: str):
    """
    Loads the customer and the order (products populated) and sends the
    confirmation. Runs after the response; errors are logged only.
    """
    with LogContext(user_id=user_id, order_id=order_id):
        try:
            user = await get_users_collection().find_one({"_id": to_object_id(user_id)})
            order = await get_orders_collection().find_one({"_id": to_object_id(order_id)})
            if not user or not order:
                logger.warning("Order confirmation skipped: user or order missing")
                return

            await populate_items([order], get_products_collection())
            await send_order_confirmation_email(user, order)
        except Exception as e:
            logger.error(f"Order confirmation email failed (background): {str(e)}", exc_info=True)


async def notify_order_status(user_id: str, order_id: str, status: str):
    with LogContext(user_id=user_id, order_id=order_id):
        try:
            user = await get_users_collection().find_one({"_id": to_object_id(user_id)})
            order = await get_orders_collection().find_one({"_id": to_object_id(order_id)})
            if not user or not order:
                logger.warning("Status email skipped: user or order missing")
                return

            await send_order_status_email(user["email"], order, status)
        except Exception as e:
            logger.error(f"Status email failed (background): {str(e)}", exc_info=True)
