"""Helpers for moving documents between MongoDB and the JSON API."""
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from fastapi import HTTPException


def parse_object_id(value: str, resource: str = "resource") -> ObjectId:
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {resource} ID format.")
    return ObjectId(value)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    # MongoDB hands datetimes back without tzinfo, so everything stored is naive UTC
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_millis(value: Optional[datetime]) -> Optional[datetime]:
    """Drop sub-millisecond precision, which BSON dates cannot hold."""
    if value is None:
        return value
    value = to_utc_naive(value)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utcnow() -> datetime:
    return datetime.utcnow()


def serialize(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize(item) for item in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert ObjectIds to strings, expose `_id` as `id` and drop the password hash."""
    if doc is None:
        return None
    result = serialize({key: item for key, item in doc.items() if key != "password"})
    if "_id" in result:
        result["id"] = result.pop("_id")
    return result
