"""
utils/constants.py

Purpose: Centralized static values

- Order, payment and coupon enums
- Status messages used in e-mails
- Default seed content

(Prevents hardcoding across the codebase)
"""

# ============================================================
# ROLES
# ============================================================

ROLE_USER = "user"
ROLE_ADMIN = "admin"

# ============================================================
# ORDERS & PAYMENTS
# ============================================================

PAYMENT_METHODS = ("COD", "Stripe", "Razorpay", "PayPal")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
ORDER_STATUSES = ("pending_payment", "processing", "shipped", "delivered", "cancelled")
PAYMENT_LOG_STATUSES = ("pending", "success", "failed", "refunded")

DEFAULT_CURRENCY = "INR"
PAYMENT_LOG_LIMIT = 200

ORDER_STATUS_MESSAGES = {
    "shipped": "Your order has been shipped! 📦",
    "delivered": "Your order has been delivered! 🎉",
    "cancelled": "Your order has been cancelled. ❌",
    "pending": "Your order is being processed. ⏳",
    "processing": "Your order is being processed. ⏳",
}
DEFAULT_STATUS_MESSAGE = "Your order status has been updated"

# ============================================================
# COUPONS
# ============================================================

DISCOUNT_PERCENTAGE = "PERCENTAGE"
DISCOUNT_FIXED = "FIXED"
DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_FIXED)

# ============================================================
# CATALOG
# ============================================================

PRODUCT_SORTS = {
    "price_asc": [("price", 1)],
    "price_desc": [("price", -1)],
    "newest": [("createdAt", -1)],
    "oldest": [("createdAt", 1)],
}

REVIEW_SORTS = {
    "latest": [("createdAt", -1)],
    "highest": [("rating", -1)],
    "lowest": [("rating", 1)],
    "helpful": [("helpfulVotes", -1)],
}

CART_PRODUCT_FIELDS = ("title", "price", "image")
ORDER_PRODUCT_FIELDS = ("title", "images", "image", "price")
CATEGORY_FIELDS = ("name", "slug", "image")
USER_SUMMARY_FIELDS = ("name", "email")

DEVICE_TYPES = ("mobile", "desktop", "tablet", "unknown")
ANALYTICS_PAGE_SIZE = 50

# ============================================================
# SEED CONTENT
# ============================================================

DEFAULT_OFFERS = [
    {
        "title": "Free Shipping",
        "description": "On Orders Above ₹599",
        "badge": "FREE SHIPPING",
        "backgroundColor": "bg-gradient-to-r from-blue-500 to-blue-600",
        "icon": True,
        "active": True,
        "order": 1,
    },
]

DEFAULT_SHIPPING_SETTINGS = {
    "shippingCost": 0,
    "freeShippingThreshold": None,
    "description": "Standard shipping applied to all orders",
    "codEnabled": True,
}

DEFAULT_TESTIMONIAL_ROLE = "Verified Customer"
