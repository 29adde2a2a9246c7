"""Unlock transition detection.

Turns full-state observations ("X is unlocked") into transitions ("X
just became unlocked"). A transition is emitted only for a locked to
unlocked change; ids never seen before count as previously locked.

Example:
    >>> engine = StateDiffEngine()
    >>> engine.seed(records)          # first load of a session, no events
    >>> newly_unlocked = engine.apply(records)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping

from models.achievement import AchievementRecord

# Configure logging
logger = logging.getLogger(__name__)


def diff(
    previous_states: Mapping[str, bool],
    fresh_records: List[AchievementRecord],
) -> List[AchievementRecord]:
    """Return the records that moved from locked to unlocked.

    Args:
        previous_states: Last observed unlocked flag per achievement id.
        fresh_records: The current observation.

    Returns:
        The newly unlocked subset of *fresh_records*, in order.
    """
    return [
        record
        for record in fresh_records
        if record.is_unlocked and not previous_states.get(record.id, False)
    ]


class StateDiffEngine:
    """Owns the last-known unlock state of the active session."""

    def __init__(self) -> None:
        self._last_known: Dict[str, bool] = {}

    @property
    def last_known(self) -> Dict[str, bool]:
        """A copy of the last-known state map."""
        return dict(self._last_known)

    def clear(self) -> None:
        self._last_known.clear()

    def seed(self, records: List[AchievementRecord]) -> None:
        """Record the first observation of a session without emitting.

        Already-unlocked achievements of a freshly detected title are
        history, not news.
        """
        self._last_known = {record.id: record.is_unlocked for record in records}
        logger.debug(
            f"Seeded unlock state for {len(records)} achievements",
            extra={"component": "state_diff"},
        )

    def apply(self, records: List[AchievementRecord]) -> List[AchievementRecord]:
        """Compute transitions, then store the observation for all records.

        Args:
            records: The current observation.

        Returns:
            Records that transitioned from locked to unlocked.
        """
        transitions = diff(self._last_known, records)
        for record in records:
            self._last_known[record.id] = record.is_unlocked
        return transitions
