"""
utils/serialization.py

Purpose: MongoDB document helpers

- ObjectId parsing and validation
- Converting documents into JSON-safe dicts for responses
"""

from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId


def is_valid_object_id(value: Any) -> bool:
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and ObjectId.is_valid(value)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """
    Converts a string to ObjectId. Returns None for anything that is not a
    valid 24-hex id so callers can answer 400/404 instead of raising.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize_doc(value: Any) -> Any:
    """
    Recursively replaces ObjectId values with their hex strings.
    Datetimes are left for FastAPI's encoder.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_doc(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_doc(item) for item in value]
    return value
