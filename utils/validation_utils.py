"""
utils/validation_utils.py

Purpose: Input validation

- Slug generation for categories
- Password strength rules shared with the SPA
- Numeric coercion for form fields
- JSON list parsing for multipart fields
"""

import json
import re
import unicodedata
from typing import Any, List, Optional


def slugify(text: str) -> str:
    """
    Builds a lowercase URL slug: "Men's Shoes & Bags" -> "mens-shoes-bags".
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def validate_password_strength(password: str) -> List[str]:
    """
    Returns the list of unmet password rules (empty when the password is acceptable).
    """
    problems = []
    if not password or len(password) < 8:
        problems.append("at least 8 characters")
    if password and not re.search(r"[A-Za-z]", password):
        problems.append("at least one letter")
    if password and not re.search(r"\d", password):
        problems.append("at least one number")
    return problems


def parse_number(value: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Coerces form input to float; blank or invalid input yields the default.
    """
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_json_list(value: Any) -> Optional[list]:
    """
    Accepts a list or a JSON-encoded list (multipart forms send strings).
    Returns None when the value is not a list.
    """
    if value is None:
        return None
    if isinstance(value, list):
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, list) else None
