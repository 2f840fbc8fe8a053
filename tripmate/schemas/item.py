"""
Pydantic schemas for trip item payloads.
"""

from datetime import datetime

from pydantic import Field, field_validator

from tripmate.models import ITEM_CATEGORIES, ITEM_TYPES
from tripmate.schemas.common import CamelModel, to_naive_utc

FALLBACK_CATEGORY = "other"
FALLBACK_TYPE = "memory"


def normalize_category(value) -> str:
    """Map a category onto the closed set, unknown values become 'other'."""
    v_lower = str(value or "").strip().lower()
    if v_lower not in ITEM_CATEGORIES:
        return FALLBACK_CATEGORY
    return v_lower


def normalize_type(value) -> str:
    """Map a type onto the closed set, unknown values become 'memory'."""
    v_lower = str(value or "").strip().lower()
    if v_lower not in ITEM_TYPES:
        return FALLBACK_TYPE
    return v_lower


class TripItemCreate(CamelModel):
    """
    POST /trips/{id}/items body, also used for full-document overwrite (PUT).

    name, category, type and createdBy are required; the rest default.
    """

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    created_by: str = Field(..., min_length=1, max_length=128)
    amount: float | None = Field(default=0)
    description: str | None = Field(default="")
    image_url: str | None = None
    thumbnail_url: str | None = None
    blur_data_url: str | None = None
    video_url: str | None = None
    images: list[str] = Field(default_factory=list)
    storage_path: str | None = None
    thumbnail_path: str | None = None
    timestamp: datetime | None = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return normalize_category(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        return normalize_type(v)

    @field_validator("amount")
    @classmethod
    def default_amount(cls, v: float | None) -> float:
        return v or 0

    @field_validator("description")
    @classmethod
    def default_description(cls, v: str | None) -> str:
        return v or ""

    @field_validator("timestamp")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class TripItemRead(CamelModel):
    """Trip item as returned by the API and delivered in live snapshots."""

    id: str
    trip_id: str
    name: str
    amount: float
    category: str
    type: str
    description: str = ""
    image_url: str | None = None
    thumbnail_url: str | None = None
    blur_data_url: str | None = None
    video_url: str | None = None
    images: list[str] = Field(default_factory=list)
    storage_path: str | None = None
    thumbnail_path: str | None = None
    created_by: str
    timestamp: datetime
    created_at: datetime
    updated_at: datetime
