"""Presence-based session detection strategy.

Asks the platform client which title the player's own presence record
reports, and accepts it only when ownership is independently confirmed.
"""

from __future__ import annotations

import logging
from typing import Optional

from adapters.base import BaseDetectionStrategy, DetectionCandidate, DetectionContext
from models.achievement import DetectionSource

# Configure logging
logger = logging.getLogger(__name__)


class PresenceStrategy(BaseDetectionStrategy):
    """Detect the active title from the player's presence record.

    Attributes:
        name: "presence"
        priority: 1 (highest)
        requires_client: True
    """

    name = "presence"
    priority = 1
    requires_client = True

    def detect(self, context: DetectionContext) -> Optional[DetectionCandidate]:
        if context.player_id is None:
            return None

        title_id = context.client.get_owned_title_id_from_presence(context.player_id)
        if not title_id or title_id <= 0:
            return None

        if not context.client.is_title_owned(title_id):
            logger.info(
                f"Presence reports title {title_id} but ownership is not confirmed",
                extra={"component": "strategy", "strategy": self.name},
            )
            return None

        return DetectionCandidate(
            title_id=int(title_id),
            source=DetectionSource.PRESENCE_API,
            evidence=f"presence of player {context.player_id}",
        )
