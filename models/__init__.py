"""AchieveSync API - Models Package.

This package contains Pydantic models for sessions, achievements,
profile snapshots and engine events.
"""

from models.achievement import (
    AchievementRecord,
    AchievementStats,
    ActiveSessionResponse,
    DetectionSource,
    GameSession,
    ProfileSnapshot,
    RarityTier,
)
from models.events import (
    AchievementUnlocked,
    EngineEvent,
    ProfileUpdated,
    SessionChanged,
    StatusMessage,
)

__all__ = [
    # Session and achievement models
    "AchievementRecord",
    "AchievementStats",
    "ActiveSessionResponse",
    "DetectionSource",
    "GameSession",
    "ProfileSnapshot",
    "RarityTier",
    # Engine events
    "AchievementUnlocked",
    "EngineEvent",
    "ProfileUpdated",
    "SessionChanged",
    "StatusMessage",
]
