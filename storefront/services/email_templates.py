"""
storefront/services/email_templates.py

Purpose: HTML bodies for transactional e-mail

- Order confirmation (items, totals, shipping address, tracking link)
- Order status update
- Password reset
- Contact form (support copy + sender confirmation)

All user-supplied text is HTML-escaped.
"""

import html
import json
from typing import Any, Dict, Optional

from utils.constants import DEFAULT_STATUS_MESSAGE, ORDER_STATUS_MESSAGES
from utils.time_utils import format_order_date

BRAND_NAME = "Farbetter"

BASE_STYLE = """
  body { font-family: 'Arial', sans-serif; line-height: 1.6; color: #333; background-color: #f9f9f9; }
  .email-container { background-color: white; padding: 20px; border-radius: 8px; margin: 20px auto; max-width: 600px; }
  .header { border-bottom: 3px solid #4CAF50; padding-bottom: 20px; margin-bottom: 20px; }
  .header h1 { margin: 0; color: #4CAF50; font-size: 28px; }
  .box { background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0; }
  .status-box { background: #e8f5e9; padding: 15px; border-left: 4px solid #4CAF50; margin: 20px 0; }
  table { width: 100%; border-collapse: collapse; margin: 20px 0; }
  th { padding: 12px; text-align: left; border-bottom: 2px solid #ddd; }
  td { padding: 12px; border-bottom: 1px solid #ddd; }
  .total-amount { font-size: 24px; color: #4CAF50; font-weight: bold; }
  .button { display: inline-block; background-color: #4CAF50; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; margin: 20px 0; }
  .footer { text-align: center; padding-top: 20px; border-top: 1px solid #ddd; color: #666; font-size: 12px; }
"""


def _e(value: Any) -> str:
    return html.escape("" if value is None else str(value))


def _money(value: Any) -> str:
    return f"₹{float(value or 0):.2f}"


def _multiline(value: Any) -> str:
    return _e(value).replace("\n", "<br>")


def _page(body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><style>{BASE_STYLE}</style></head>
<body>
  <div class="email-container">
    {body}
    <div class="footer">
      <p>&copy; {BRAND_NAME}. All rights reserved.</p>
    </div>
  </div>
</body>
</html>"""


def _items_rows(order: Dict[str, Any]) -> str:
    rows = []
    for item in order.get("items", []):
        product = item.get("product")
        title = product.get("title") if isinstance(product, dict) else None
        price = float(item.get("price") or 0)
        quantity = int(item.get("quantity") or 0)
        rows.append(
            "<tr>"
            f"<td><strong>{_e(title or 'Product')}</strong></td>"
            f"<td style=\"text-align: center;\">{quantity}</td>"
            f"<td style=\"text-align: right;\">{_money(price)}</td>"
            f"<td style=\"text-align: right;\"><strong>{_money(price * quantity)}</strong></td>"
            "</tr>"
        )
    return "".join(rows)


def _address_block(address: Optional[Dict[str, Any]]) -> str:
    if not address:
        return ""
    return f"""
    <div class="box">
      <h3 style="margin-top: 0;">Shipping Address</h3>
      <p style="margin: 5px 0;">
        <strong>{_e(address.get('fullName'))}</strong><br>
        {_e(address.get('street'))}<br>
        {_e(address.get('city'))}, {_e(address.get('state'))} {_e(address.get('postalCode'))}<br>
        {_e(address.get('country'))}<br>
        📞 {_e(address.get('phone'))}
      </p>
    </div>"""


def order_confirmation_html(order: Dict[str, Any], frontend_url: str) -> str:
    shipping_cost = float(order.get("shippingCost") or 0)
    discount = float(order.get("discountAmount") or 0)
    subtotal = order.get("subtotal")
    if subtotal is None:
        subtotal = float(order.get("totalAmount") or 0) - shipping_cost + discount

    discount_line = ""
    if discount > 0:
        code = f" ({_e(order.get('couponCode'))})" if order.get("couponCode") else ""
        discount_line = f"<p style=\"margin: 10px 0;\"><strong>Discount{code}:</strong> -{_money(discount)}</p>"

    shipping_label = _money(shipping_cost) if shipping_cost > 0 else "FREE"

    body = f"""
    <div class="header">
      <h1>✅ Order Confirmed!</h1>
      <p>Thank you for your order. We're getting it ready to ship!</p>
    </div>

    <div class="status-box">
      <p><strong>Order ID:</strong> {_e(order.get('_id'))}</p>
      <p><strong>Order Date:</strong> {_e(format_order_date(order.get('createdAt')))}</p>
      <p><strong>Status:</strong> {_e(order.get('orderStatus', 'processing'))}</p>
      <p><strong>Payment Method:</strong> {_e(order.get('paymentMethod'))}</p>
      <p><strong>Payment Status:</strong> {_e(order.get('paymentStatus'))}</p>
    </div>

    <h3>Order Summary</h3>
    <table>
      <thead>
        <tr><th>Product</th><th>Quantity</th><th>Unit Price</th><th>Total</th></tr>
      </thead>
      <tbody>{_items_rows(order)}</tbody>
    </table>

    <div class="box" style="text-align: right;">
      <p style="margin: 10px 0;"><strong>Subtotal:</strong> {_money(subtotal)}</p>
      {discount_line}
      <p style="margin: 10px 0;"><strong>Shipping:</strong> {shipping_label}</p>
      <div class="total-amount">Total: {_money(order.get('totalAmount'))}</div>
    </div>

    {_address_block(order.get('shippingAddress'))}

    <div style="text-align: center; margin: 20px 0;">
      <p>Track your order on our website:</p>
      <a href="{_e(frontend_url)}/user/dashboard" class="button">Track Order</a>
    </div>"""
    return _page(body)


def order_status_html(order: Dict[str, Any], status: str) -> str:
    headline = ORDER_STATUS_MESSAGES.get(status, DEFAULT_STATUS_MESSAGE)
    body = f"""
    <h2>Order Status Update</h2>
    <p>Hello,</p>
    <div class="status-box">
      <h3 style="margin-top: 0;">{_e(headline)}</h3>
      <p><strong>Order ID:</strong> {_e(order.get('_id'))}</p>
      <p><strong>Current Status:</strong> <strong>{_e(status.upper())}</strong></p>
    </div>
    <p>You can track your order anytime on our website.</p>"""
    return _page(body)


def password_reset_html(name: str, reset_url: str) -> str:
    body = f"""
    <h2>Reset Your Password</h2>
    <p>Hello {_e(name)},</p>
    <p>You received this email because you requested a password reset for your account.</p>
    <p>Please click the button below to reset your password. The link expires in 10 minutes.</p>
    <div style="text-align: center;">
      <a href="{_e(reset_url)}" class="button">Reset Password</a>
    </div>
    <p>If you didn't request this, you can safely ignore this email.</p>"""
    return _page(body)


def contact_support_html(name: str, email: str, subject: str, message: str) -> str:
    body = f"""
    <h2>New Contact Form Submission</h2>
    <p><strong>Name:</strong> {_e(name)}</p>
    <p><strong>Email:</strong> {_e(email)}</p>
    <p><strong>Subject:</strong> {_e(subject)}</p>
    <p><strong>Message:</strong></p>
    <p>{_multiline(message)}</p>"""
    return _page(body)


def contact_confirmation_html(name: str, message: str) -> str:
    body = f"""
    <h2>Thank you for contacting us!</h2>
    <p>Hi {_e(name)},</p>
    <p>We have received your message and will get back to you as soon as possible.</p>
    <p><strong>Your Message:</strong></p>
    <p>{_multiline(message)}</p>
    <p>Best regards,<br>{BRAND_NAME} Team</p>"""
    return _page(body)


def debug_html(env_check: Dict[str, Any]) -> str:
    body = f"""
    <h1>Test Email</h1>
    <p>This is a test email triggered from the debug endpoint.</p>
    <h3>Environment Check:</h3>
    <pre>{_e(json.dumps(env_check, indent=2, default=str))}</pre>"""
    return _page(body)
