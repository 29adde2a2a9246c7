"""AchieveSync API - Detection Strategies Package.

This package contains the session detection strategies.
"""

from adapters.strategies.base import BaseDetectionStrategy
from adapters.strategies.presence import PresenceStrategy
from adapters.strategies.process_scan import ProcessScanStrategy

__all__ = [
    "BaseDetectionStrategy",
    "PresenceStrategy",
    "ProcessScanStrategy",
]
