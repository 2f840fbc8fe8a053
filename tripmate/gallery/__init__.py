"""
Read-only views over a trip's items: statistics, filters and navigation.
"""

from tripmate.gallery.stats import TripStats, budget_status, compute_trip_stats
from tripmate.gallery.view_model import GalleryViewModel

__all__ = [
    "GalleryViewModel",
    "TripStats",
    "budget_status",
    "compute_trip_stats",
]
