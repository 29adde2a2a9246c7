"""AchieveSync API - Adapters Package.

This package contains the platform client interface, the local Steam
client and the session detection strategy system.
"""

from adapters.base import (
    BaseDetectionStrategy,
    BasePlatformClient,
    DetectionCandidate,
    DetectionContext,
    PlatformClientError,
)
from adapters.registry import StrategyRegistry
from adapters.steam_client import LocalSteamClient
from adapters.steam_library import SteamLibrary

__all__ = [
    "BaseDetectionStrategy",
    "BasePlatformClient",
    "DetectionCandidate",
    "DetectionContext",
    "LocalSteamClient",
    "PlatformClientError",
    "StrategyRegistry",
    "SteamLibrary",
]
