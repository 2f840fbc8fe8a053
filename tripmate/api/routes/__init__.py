"""
API route modules.
"""

from tripmate.api.routes.ai import router as ai_router
from tripmate.api.routes.downloads import router as downloads_router
from tripmate.api.routes.health import router as health_router
from tripmate.api.routes.items import router as items_router
from tripmate.api.routes.trips import router as trips_router
from tripmate.api.routes.uploads import router as uploads_router

__all__ = [
    "ai_router",
    "downloads_router",
    "health_router",
    "items_router",
    "trips_router",
    "uploads_router",
]
