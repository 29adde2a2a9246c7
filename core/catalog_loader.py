"""Achievement catalog loading for the active session.

This module reads the full achievement list of the active title from
the platform client, tolerating per-entry and per-field failures.

Rarity tiers are a presentation heuristic: each achievement id is
hashed onto fixed percentile buckets. They are deterministic per id but
do NOT reflect real global unlock percentages.

Example:
    >>> loader = AchievementCatalogLoader(client)
    >>> records = loader.load(session)
    >>> [r.rarity_tier for r in records]
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable, Dict, List, Optional, Tuple

from adapters.base import BasePlatformClient
from models.achievement import AchievementRecord, GameSession, RarityTier

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "No description available"

# Upper bound of each bucket on [0, 1), checked in order.
RARITY_BUCKETS: Tuple[Tuple[float, RarityTier], ...] = (
    (0.01, RarityTier.LEGENDARY),
    (0.05, RarityTier.EPIC),
    (0.25, RarityTier.RARE),
    (0.50, RarityTier.UNCOMMON),
)

UnlockState = Tuple[bool, Optional[int]]


def rarity_for(achievement_id: str) -> RarityTier:
    """Map an achievement id to a rarity tier.

    Placeholder heuristic: a stable hash of the id, not a global
    unlock statistic.
    """
    digest = hashlib.sha256(achievement_id.encode("utf-8")).digest()
    value = int.from_bytes(digest[:8], "big") / 2**64
    for upper, tier in RARITY_BUCKETS:
        if value <= upper:
            return tier
    return RarityTier.COMMON


class AchievementCatalogLoader:
    """Loads and re-polls achievement state from the platform client.

    Attributes:
        _client: The platform client.
        _status: Callback receiving advisory status messages.
    """

    def __init__(
        self,
        client: BasePlatformClient,
        status: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._client = client
        self._status = status or (lambda text: None)

    def load(self, session: GameSession) -> List[AchievementRecord]:
        """Load the full achievement list for *session*.

        A failed stats request or an empty catalog yields an empty list;
        many titles have no achievements. A failure on one entry skips
        only that entry.

        Args:
            session: The newly detected game session.

        Returns:
            Achievement records in platform index order.
        """
        try:
            if not self._client.request_stats_refresh():
                self._status(f"Unable to request stats for {session.display_name}")
                return []
            count = int(self._client.get_achievement_count())
        except Exception as e:
            self._status(f"Stats request failed: {e}")
            return []

        if count <= 0:
            logger.info(
                f"{session.display_name} has no achievements",
                extra={"component": "catalog", "title_id": session.title_id},
            )
            return []

        self._status(f"Loading {count} achievements...")

        records: List[AchievementRecord] = []
        for index in range(count):
            try:
                record = self._load_entry(index, session.title_id)
            except Exception as e:
                self._status(f"Error processing achievement {index}: {e}")
                continue
            if record is not None:
                records.append(record)

        self._status(f"Successfully loaded {len(records)} achievements")
        return records

    def poll_unlock_states(self, records: List[AchievementRecord]) -> Dict[str, UnlockState]:
        """Re-read the unlock state of already-loaded achievements.

        Ids whose state cannot be read are omitted, so they keep their
        last observed value.

        Args:
            records: The current achievement list.

        Returns:
            Mapping of achievement id to ``(unlocked, unlock_time)``.
        """
        try:
            self._client.request_stats_refresh()
        except Exception as e:
            logger.debug(f"Stats refresh failed, using cached client state: {e}")

        states: Dict[str, UnlockState] = {}
        for record in records:
            state = self._read_unlock_state(record.id)
            if state is not None:
                states[record.id] = state
        return states

    def _load_entry(self, index: int, title_id: int) -> Optional[AchievementRecord]:
        achievement_id = self._client.get_achievement_id_at(index)
        if not achievement_id:
            return None

        unlocked, unlock_time = self._read_unlock_state(achievement_id) or (False, None)

        name = self._attribute(achievement_id, "name") or achievement_id
        description = self._attribute(achievement_id, "desc") or DEFAULT_DESCRIPTION
        hidden = self._attribute(achievement_id, "hidden") == "1"

        record = AchievementRecord(
            id=achievement_id,
            name=name,
            description=description,
            is_hidden=hidden,
            rarity_tier=rarity_for(achievement_id),
            title_id=title_id,
        )
        record.set_unlock_state(unlocked, unlock_time)
        return record

    def _read_unlock_state(self, achievement_id: str) -> Optional[UnlockState]:
        try:
            unlocked, unlock_time = self._client.get_achievement_unlock_state(achievement_id)
            return bool(unlocked), unlock_time
        except Exception as e:
            logger.debug(f"Combined unlock query failed for {achievement_id}: {e}")

        try:
            return bool(self._client.get_achievement_unlocked(achievement_id)), None
        except Exception as e:
            logger.debug(f"Unlocked-only query failed for {achievement_id}: {e}")
            return None

    def _attribute(self, achievement_id: str, attribute_name: str) -> Optional[str]:
        try:
            return self._client.get_achievement_display_attribute(achievement_id, attribute_name)
        except Exception as e:
            logger.debug(f"Attribute '{attribute_name}' failed for {achievement_id}: {e}")
            return None
