"""Trip model: a shared travel budget context."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tripmate.database import Base, utcnow


def new_document_id() -> str:
    """Store-assigned identifier for trips and items."""
    return uuid.uuid4().hex


class Trip(Base):
    """
    Trip holds the budget, currency and member count used for splitting.

    Items live in their own table keyed by `trip_id` (no foreign key), the
    same way a document store keeps them in a subcollection.
    """

    __tablename__ = "trip"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=new_document_id
    )

    # Trip Info
    trip_name: Mapped[str] = mapped_column(String(255), nullable=False)
    total_budget: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(8), nullable=False)
    # Split divisor; read through effective_member_count()
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Dates
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Ownership
    created_by: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Trip(id={self.id}, name={self.trip_name}, members={self.member_count})>"
