"""Base classes for platform clients and session detection strategies.

This module defines the abstract interface the engine consumes from the
game-platform client, and the abstract base class every detection
strategy implements.

Example:
    >>> from adapters.base import BaseDetectionStrategy
    >>> class RegistryStrategy(BaseDetectionStrategy):
    ...     name = "registry"
    ...     priority = 3
    ...     def detect(self, context):
    ...         return None
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from models.achievement import DetectionSource

# Configure logging
logger = logging.getLogger(__name__)


class PlatformClientError(Exception):
    """Raised by platform clients when a query cannot be answered."""


class BasePlatformClient(ABC):
    """Abstract façade over the achievement platform client.

    Concrete implementations wrap a platform SDK binding (for Steam, a
    Steamworks wrapper). Any method may raise; the engine treats every
    call as fallible and downgrades failures to status messages.
    """

    @abstractmethod
    def is_client_running(self) -> bool:
        """Return True if the platform client process is running."""

    @abstractmethod
    def initialize_session(self) -> bool:
        """Connect to the running client. Returns True on success."""

    @abstractmethod
    def get_player_name(self) -> str:
        """Return the logged-in player's persona name."""

    @abstractmethod
    def get_player_id(self) -> int:
        """Return the logged-in player's numeric id."""

    @abstractmethod
    def get_owned_title_id_from_presence(self, player_id: int) -> Optional[int]:
        """Return the title the player's presence reports, if any."""

    @abstractmethod
    def is_title_owned(self, title_id: int) -> bool:
        """Return True if the player owns *title_id*."""

    @abstractmethod
    def request_stats_refresh(self) -> bool:
        """Ask the client to refresh the current title's stats."""

    @abstractmethod
    def get_achievement_count(self) -> int:
        """Return the number of achievements of the current title."""

    @abstractmethod
    def get_achievement_id_at(self, index: int) -> str:
        """Return the immutable id of the achievement at *index*."""

    @abstractmethod
    def get_achievement_unlock_state(self, achievement_id: str) -> Tuple[bool, Optional[int]]:
        """Return ``(unlocked, unlock_time)`` for *achievement_id*."""

    @abstractmethod
    def get_achievement_display_attribute(
        self, achievement_id: str, attribute_name: str
    ) -> Optional[str]:
        """Return a display attribute (``name``, ``desc``, ``hidden``)."""

    @abstractmethod
    def get_install_directory(self, title_id: int) -> Optional[str]:
        """Return the install directory of *title_id*, if installed."""

    def get_achievement_unlocked(self, achievement_id: str) -> bool:
        """Unlocked-only query used when the combined query fails.

        The default delegates to :meth:`get_achievement_unlock_state`;
        SDK bindings override it with the cheaper dedicated call.
        """
        unlocked, _ = self.get_achievement_unlock_state(achievement_id)
        return unlocked

    def shutdown(self) -> None:
        """Release the client session. Default is a no-op."""


@dataclass
class DetectionContext:
    """Per-cycle inputs shared by all detection strategies.

    Attributes:
        client: The platform client.
        client_initialized: Whether ``initialize_session`` succeeded.
        player_id: The logged-in player's id, when known.
    """

    client: BasePlatformClient
    client_initialized: bool = False
    player_id: Optional[int] = None


@dataclass(frozen=True)
class DetectionCandidate:
    """A title id proposed by a strategy, before name resolution."""

    title_id: int
    source: DetectionSource
    evidence: str = ""


class BaseDetectionStrategy(ABC):
    """Abstract base class for session detection strategies.

    A strategy encapsulates a single signal for "which title is
    running". Strategies are evaluated in ascending ``priority`` order
    and the first non-zero candidate wins.

    Attributes:
        name: Short identifier used in logs and registry lookups.
        priority: Lower values = higher priority (tried first).
        requires_client: Skip this strategy while the platform client
            session is not initialized.
    """

    name: str = ""
    priority: int = 100
    requires_client: bool = False

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the strategy with optional configuration.

        Args:
            config: Optional configuration dictionary.
        """
        self.config = config or {}

    @abstractmethod
    def detect(self, context: DetectionContext) -> Optional[DetectionCandidate]:
        """Return a candidate title, or None when this signal has none.

        Raises:
            Exception: Any failure; the detector catches and logs it.
        """

    def is_available(self, context: DetectionContext) -> bool:
        """Check whether this strategy can run in the given context."""
        return context.client_initialized or not self.requires_client

    @staticmethod
    def verify_ownership(context: DetectionContext, title_id: int) -> bool:
        """Confirm ownership when the client is initialized.

        In degraded mode (no client session) the candidate is accepted
        unverified.
        """
        if not context.client_initialized:
            return True
        return bool(context.client.is_title_owned(title_id))
