"""AchieveSync API - API Package.

This package contains FastAPI routers and endpoint definitions.
"""

from api.endpoints import achievements

__all__ = ["achievements"]
