"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Naive-UTC timestamps (the form MongoDB hands back)
- Expiry checks for coupons and reset tokens
- Timestamp formatting for e-mails
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Returns the current UTC time without tzinfo, matching what pymongo
    returns for stored dates.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalizes an aware datetime to naive UTC. Naive input is assumed to be UTC already.
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Checks whether a deadline has passed. A missing deadline counts as expired.
    """
    if not expires_at:
        return True
    now = now or utc_now()
    return now > to_naive_utc(expires_at)


def minutes_from_now(minutes: int) -> datetime:
    return utc_now() + timedelta(minutes=minutes)


def hours_ago(hours: int) -> datetime:
    return utc_now() - timedelta(hours=hours)


def format_order_date(dt: Optional[datetime]) -> str:
    """
    Formats a date the way order e-mails show it, e.g. "5 March 2025".
    """
    if not dt:
        return "N/A"
    return f"{dt.day} {dt.strftime('%B %Y')}"
