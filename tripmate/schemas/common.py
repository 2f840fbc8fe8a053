"""
Shared Pydantic configuration for API payloads.

JSON bodies use camelCase (tripName, imageUrl); Python attributes stay snake_case.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases, populated by either name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert aware datetimes to naive UTC; naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def expand_date_only(value):
    """Accept bare YYYY-MM-DD strings for datetime fields."""
    if isinstance(value, str) and len(value) == 10:
        return f"{value}T00:00:00"
    return value
