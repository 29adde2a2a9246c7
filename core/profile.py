"""Profile summary aggregation."""

from __future__ import annotations

from typing import List, Optional, Tuple

from models.achievement import (
    AchievementRecord,
    AchievementStats,
    GameSession,
    ProfileSnapshot,
    RarityTier,
)


def completion_percent(unlocked: int, total: int) -> float:
    """Return ``100 * unlocked / total``, or 0 when *total* is 0."""
    if total == 0:
        return 0.0
    return 100.0 * unlocked / total


class ProfileAggregator:
    """Derives summary counters and snapshots from an achievement list."""

    @staticmethod
    def compute(records: List[AchievementRecord]) -> Tuple[int, int, float]:
        """Return ``(total, unlocked, percent)`` for *records*."""
        total = len(records)
        unlocked = sum(1 for record in records if record.is_unlocked)
        return total, unlocked, completion_percent(unlocked, total)

    def snapshot(
        self,
        player_name: str,
        session: Optional[GameSession],
        records: List[AchievementRecord],
    ) -> ProfileSnapshot:
        """Build an immutable snapshot of the current progress."""
        total, unlocked, percent = self.compute(records)
        return ProfileSnapshot(
            player_name=player_name,
            session_title_name=session.display_name if session else "",
            session_title_id=session.title_id if session else None,
            total_count=total,
            unlocked_count=unlocked,
            completion_percent=percent,
        )

    def stats(self, records: List[AchievementRecord]) -> AchievementStats:
        """Counters plus the per-rarity breakdown."""
        total, unlocked, percent = self.compute(records)
        by_rarity = {tier: 0 for tier in RarityTier}
        for record in records:
            by_rarity[record.rarity_tier] += 1
        return AchievementStats(
            total=total,
            unlocked=unlocked,
            locked=total - unlocked,
            completion_percent=percent,
            by_rarity=by_rarity,
        )
