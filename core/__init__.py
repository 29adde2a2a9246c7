"""AchieveSync API - Core Services Package.

This package contains the detection and synchronization engine.
"""

from core.events import EventBus
from core.name_cache import NameResolutionCache
from core.scheduler import PollScheduler
from core.session_detector import SessionDetector
from core.sync_engine import AchievementSyncEngine

__all__ = [
    "AchievementSyncEngine",
    "EventBus",
    "NameResolutionCache",
    "PollScheduler",
    "SessionDetector",
]
