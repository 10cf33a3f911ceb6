"""
Firestore document helpers shared by the Firestore-backed stores.

NOTE: For firebase_admin SDK, we use positional arguments in where();
the deprecation warning about FieldFilter is just a warning.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "updated_at")


def where_filter(query, field_path: str, op_string: str, value):
    """
    Usage:
        query = where_filter(collection, "user_id", "==", user_id)
        query = where_filter(query, "status", "==", "open")
    """
    return query.where(field_path, op_string, value)


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Convert a Firestore timestamp (DatetimeWithNanoseconds, proto Timestamp
    or ISO string) into a plain datetime.
    """
    if value is None or isinstance(value, datetime):
        return value
    if hasattr(value, "to_datetime"):
        return value.to_datetime()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    logger.warning(f"Unknown timestamp type: {type(value)}, using current time")
    return datetime.now(timezone.utc)


def snapshot_to_dict(doc) -> Optional[Dict]:
    """Document snapshot → dict with `id` set, or None if it does not exist."""
    if doc is None or not doc.exists:
        return None

    data = doc.to_dict() or {}
    data["id"] = doc.id
    for field in TIMESTAMP_FIELDS:
        if field in data:
            data[field] = to_datetime(data[field])
    return data
