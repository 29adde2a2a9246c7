"""AchieveSync API - Endpoints Package.

This package contains all API endpoint routers.
"""

from api.endpoints.achievements import router as achievements_router

__all__ = [
    "achievements_router",
]
