"""Shared validation utilities"""

import uuid
from datetime import date, datetime, time, timezone
from typing import Optional

from .errors import ValidationError


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def normalize_id(value: Optional[str]) -> Optional[str]:
    """Canonical lower-case form of a UUID string, or None if it is not one"""
    if not value or not validate_uuid(value):
        return None
    return str(uuid.UUID(value))


def parse_id(value: Optional[str], field: str) -> str:
    """
    Validate an entity ID and return it normalized.

    Raises:
        ValidationError: If the ID is missing or not a UUID
    """
    normalized = normalize_id(value)
    if normalized is None:
        raise ValidationError(f"invalid {field}")
    return normalized


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_hhmm(value: Optional[time]) -> Optional[str]:
    """Format a time as HH:MM, dropping seconds"""
    if value is None:
        return None
    return value.strftime("%H:%M")


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")
