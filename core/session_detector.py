"""Session detection service for AchieveSync API.

This module decides which title, if any, is currently active by walking
the registered detection strategies in priority order.

Example:
    >>> from core.session_detector import SessionDetector
    >>> detector = SessionDetector(registry, name_cache)
    >>> session = detector.detect(previous_session, context)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from adapters.base import DetectionCandidate, DetectionContext
from adapters.registry import StrategyRegistry
from core.name_cache import NameResolutionCache
from models.achievement import GameSession

# Configure logging
logger = logging.getLogger(__name__)


class SessionDetector:
    """Runs the detection chain and deduplicates against the last result.

    Strategies are evaluated sequentially; the first one producing a
    non-zero title id wins and later strategies are not consulted. A
    failing strategy is reported and treated as "no candidate".

    Attributes:
        _registry: Ordered detection strategies.
        _names: Title name resolver.
        _status: Callback receiving advisory status messages.
    """

    def __init__(
        self,
        registry: StrategyRegistry,
        names: NameResolutionCache,
        status: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Initialize the session detector.

        Args:
            registry: The strategy registry to walk.
            names: Cache used to name newly detected titles.
            status: Optional status message sink.
        """
        self._registry = registry
        self._names = names
        self._status = status or (lambda text: None)

    def find_candidate(self, context: DetectionContext) -> Optional[DetectionCandidate]:
        """Return the first candidate produced by the strategy chain."""
        for strategy in self._registry.get_all():
            if not strategy.is_available(context):
                logger.debug(
                    f"Strategy {strategy.name} skipped, client not initialized",
                    extra={"component": "detector"},
                )
                continue

            try:
                candidate = strategy.detect(context)
            except Exception as e:
                self._status(f"Detection strategy '{strategy.name}' failed: {e}")
                logger.warning(
                    f"Strategy {strategy.name} failed: {e}",
                    extra={"component": "detector"},
                )
                continue

            if candidate is not None and candidate.title_id > 0:
                logger.debug(
                    f"Strategy {strategy.name} found title {candidate.title_id}",
                    extra={"component": "detector", "title_id": candidate.title_id},
                )
                return candidate

        return None

    def detect(
        self,
        previous: Optional[GameSession],
        context: DetectionContext,
    ) -> Optional[GameSession]:
        """Decide the active session.

        Args:
            previous: The session detected by the last cycle, if any.
            context: Client state for this cycle.

        Returns:
            ``previous`` itself when the same title is still running, a
            new GameSession when the title changed, or None when no
            strategy produced a candidate.
        """
        candidate = self.find_candidate(context)
        if candidate is None:
            return None

        if previous is not None and previous.title_id == candidate.title_id:
            return previous

        session = GameSession(
            title_id=candidate.title_id,
            display_name=self._names.resolve_name(candidate.title_id),
            detection_source=candidate.source,
        )
        logger.info(
            f"Detected {session.display_name} ({session.title_id}) "
            f"via {session.detection_source.value}",
            extra={"component": "detector", "title_id": session.title_id},
        )
        return session
