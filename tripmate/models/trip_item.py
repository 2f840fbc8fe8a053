"""TripItem model: one expense record or one photo/video memory."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tripmate.database import Base, utcnow
from tripmate.models.trip import new_document_id

ITEM_CATEGORIES = ("food", "transport", "stay", "other", "scenery", "memory", "video")
ITEM_TYPES = ("expense", "memory")


class TripItem(Base):
    """
    TripItem is scoped to exactly one trip.

    `type` and `category` are independent axes; combinations such as
    type=memory / category=food are valid. `amount` only counts towards
    spend when type == "expense".
    """

    __tablename__ = "trip_item"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=new_document_id
    )
    trip_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    # Classification
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Assets
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    blur_data_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    storage_path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    thumbnail_path: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # Ownership
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)

    # Timestamps (timestamp = when the expense/memory happened)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<TripItem(id={self.id}, trip={self.trip_id}, type={self.type}, category={self.category})>"
