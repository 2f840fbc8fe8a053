"""
Pydantic schemas for trip payloads.
"""

from datetime import datetime

from pydantic import Field, field_validator

from tripmate.schemas.common import CamelModel, expand_date_only, to_naive_utc


class TripCreate(CamelModel):
    """POST /trips body. Every field except endDate is required and non-empty."""

    trip_name: str = Field(..., min_length=1, max_length=255, examples=["Da Lat 2025"])
    total_budget: float = Field(..., gt=0, description="Budget in thousands of currency units")
    start_date: datetime
    end_date: datetime | None = None
    currency: str = Field(..., min_length=1, max_length=8, examples=["VND", "USD"])
    member_count: int = Field(..., ge=1, description="Split divisor")
    created_by: str = Field(..., min_length=1, max_length=128)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def accept_date_only(cls, v):
        return expand_date_only(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class TripUpdate(CamelModel):
    """
    PATCH /trips/{id} body: any subset of the mutable trip fields.

    No range checks here; memberCount=0 is stored as given and guarded at
    read time by effective_member_count().
    """

    trip_name: str | None = None
    total_budget: float | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    currency: str | None = None
    member_count: int | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def accept_date_only(cls, v):
        return expand_date_only(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class DefaultTripRequest(CamelModel):
    """POST /trips/default body."""

    user_id: str = Field(..., min_length=1)


class TripRead(CamelModel):
    """Trip as returned by the API."""

    id: str
    trip_name: str
    total_budget: float
    start_date: datetime
    end_date: datetime | None = None
    currency: str
    member_count: int
    created_by: str
    created_at: datetime
    updated_at: datetime
