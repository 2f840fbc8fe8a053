"""
SQLAlchemy ORM models for the application.
All models must be imported here so metadata.create_all sees them.
"""

from tripmate.models.trip import Trip, new_document_id
from tripmate.models.trip_item import ITEM_CATEGORIES, ITEM_TYPES, TripItem

__all__ = [
    "Trip",
    "TripItem",
    "ITEM_CATEGORIES",
    "ITEM_TYPES",
    "new_document_id",
]
