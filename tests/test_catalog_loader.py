"""Tests for core.catalog_loader."""

from collections import Counter

import pytest

from core.catalog_loader import (
    DEFAULT_DESCRIPTION,
    AchievementCatalogLoader,
    rarity_for,
)
from models.achievement import DetectionSource, GameSession, RarityTier


@pytest.fixture()
def session():
    return GameSession(
        title_id=480,
        display_name="Spacewar",
        detection_source=DetectionSource.PROCESS_SCAN,
    )


@pytest.fixture()
def messages():
    return []


@pytest.fixture()
def loader(client, messages):
    return AchievementCatalogLoader(client, status=messages.append)


class TestLoad:
    def test_loads_in_index_order_with_attributes(self, client, loader, session):
        client.achievements = {
            "ACH_WIN": (True, 1700000000),
            "ACH_TRAVEL": (False, None),
        }
        client.attributes = {
            "ACH_WIN": {"name": "Winner", "desc": "Win one game.", "hidden": "0"},
            "ACH_TRAVEL": {"name": "Traveler", "desc": "Travel far.", "hidden": "1"},
        }

        records = loader.load(session)

        assert [r.id for r in records] == ["ACH_WIN", "ACH_TRAVEL"]
        win, travel = records
        assert win.name == "Winner"
        assert win.is_unlocked is True
        assert win.unlock_timestamp == 1700000000
        assert win.is_hidden is False
        assert win.title_id == 480
        assert travel.is_hidden is True
        assert travel.unlock_timestamp is None

    def test_missing_attributes_fall_back(self, client, loader, session):
        client.achievements = {"ACH_X": (False, None)}

        record = loader.load(session)[0]

        assert record.name == "ACH_X"
        assert record.description == DEFAULT_DESCRIPTION
        assert record.is_hidden is False

    def test_broken_entry_is_skipped(self, client, loader, session, messages):
        client.achievements = {
            "A": (False, None),
            "B": (True, 1700000000),
            "C": (False, None),
        }
        client.broken_ids = {"B"}

        records = loader.load(session)

        assert [r.id for r in records] == ["A", "C"]
        assert any("Error processing achievement 1" in m for m in messages)

    def test_combined_query_failure_uses_unlocked_only(self, client, loader, session):
        client.achievements = {"A": (True, 1700000000)}
        client.combined_query_fails = {"A"}

        record = loader.load(session)[0]

        assert record.is_unlocked is True
        assert record.unlock_timestamp is not None

    def test_failed_stats_request_yields_empty(self, client, loader, session, messages):
        client.achievements = {"A": (False, None)}
        client.stats_ok = False

        assert loader.load(session) == []
        assert messages == ["Unable to request stats for Spacewar"]

    def test_zero_achievements(self, client, loader, session):
        assert loader.load(session) == []

    def test_progress_messages(self, client, loader, session, messages):
        client.achievements = {"A": (False, None), "B": (False, None)}
        loader.load(session)
        assert messages == [
            "Loading 2 achievements...",
            "Successfully loaded 2 achievements",
        ]


class TestPollUnlockStates:
    def test_reads_current_states(self, client, loader, session):
        client.achievements = {"A": (False, None), "B": (False, None)}
        records = loader.load(session)
        client.achievements["A"] = (True, 1700000123)

        states = loader.poll_unlock_states(records)

        assert states == {"A": (True, 1700000123), "B": (False, None)}

    def test_unreadable_ids_are_omitted(self, client, loader, session):
        client.achievements = {"A": (False, None)}
        records = loader.load(session)
        del client.achievements["A"]

        assert loader.poll_unlock_states(records) == {}


class TestRarity:
    def test_deterministic(self):
        assert rarity_for("ACH_WIN_ONE_GAME") == rarity_for("ACH_WIN_ONE_GAME")

    def test_distribution_follows_buckets(self):
        tiers = Counter(rarity_for(f"ACH_{i}") for i in range(4000))
        # Buckets are 1/4/20/25/50 percent wide.
        assert tiers[RarityTier.COMMON] > tiers[RarityTier.UNCOMMON] > tiers[RarityTier.EPIC]
        assert tiers[RarityTier.RARE] > tiers[RarityTier.EPIC] > tiers[RarityTier.LEGENDARY]
        assert tiers[RarityTier.LEGENDARY] > 0
