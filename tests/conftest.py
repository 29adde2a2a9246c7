"""Shared fixtures: an in-memory platform client and engine wiring."""

from typing import Dict, List, Optional, Set, Tuple

import pytest
import requests

from adapters.base import BaseDetectionStrategy, BasePlatformClient, DetectionCandidate
from adapters.registry import StrategyRegistry
from core.name_cache import NameResolutionCache
from core.sync_engine import AchievementSyncEngine
from models.achievement import DetectionSource


class FakePlatformClient(BasePlatformClient):
    """Scriptable platform client.

    ``achievements`` maps id -> (unlocked, unlock_time); ``attributes``
    maps id -> {attribute: value}. Ids in ``broken_ids`` raise on every
    read.
    """

    def __init__(self) -> None:
        self.running = True
        self.init_ok = True
        self.player_name = "gaben"
        self.player_id = 76561197960287930
        self.presence_title: Optional[int] = None
        self.owned: Set[int] = set()
        self.install_dirs: Dict[int, str] = {}
        self.stats_ok = True
        self.achievements: Dict[str, Tuple[bool, Optional[int]]] = {}
        self.attributes: Dict[str, Dict[str, str]] = {}
        self.broken_ids: Set[str] = set()
        self.combined_query_fails: Set[str] = set()
        self.stats_requests = 0
        self.init_calls = 0
        self.shutdown_called = False

    def is_client_running(self) -> bool:
        return self.running

    def initialize_session(self) -> bool:
        self.init_calls += 1
        return self.init_ok

    def get_player_name(self) -> str:
        return self.player_name

    def get_player_id(self) -> int:
        return self.player_id

    def get_owned_title_id_from_presence(self, player_id: int) -> Optional[int]:
        return self.presence_title

    def is_title_owned(self, title_id: int) -> bool:
        return title_id in self.owned

    def request_stats_refresh(self) -> bool:
        self.stats_requests += 1
        return self.stats_ok

    def get_achievement_count(self) -> int:
        return len(self.achievements)

    def get_achievement_id_at(self, index: int) -> str:
        achievement_id = list(self.achievements)[index]
        if achievement_id in self.broken_ids:
            raise RuntimeError(f"cannot read {achievement_id}")
        return achievement_id

    def get_achievement_unlock_state(self, achievement_id: str) -> Tuple[bool, Optional[int]]:
        if achievement_id in self.combined_query_fails:
            raise RuntimeError("combined query unavailable")
        return self.achievements[achievement_id]

    def get_achievement_unlocked(self, achievement_id: str) -> bool:
        return self.achievements[achievement_id][0]

    def get_achievement_display_attribute(
        self, achievement_id: str, attribute_name: str
    ) -> Optional[str]:
        return self.attributes.get(achievement_id, {}).get(attribute_name)

    def get_install_directory(self, title_id: int) -> Optional[str]:
        return self.install_dirs.get(title_id)

    def shutdown(self) -> None:
        self.shutdown_called = True


class ScriptedStrategy(BaseDetectionStrategy):
    """Strategy returning queued title ids; 0 means no candidate."""

    def __init__(self, name: str, priority: int, titles: Optional[List[int]] = None) -> None:
        super().__init__()
        self.name = name
        self.priority = priority
        self.titles = list(titles or [])
        self.calls = 0
        self.error: Optional[Exception] = None

    def detect(self, context):
        self.calls += 1
        if self.error is not None:
            raise self.error
        # The last queued title repeats forever.
        if len(self.titles) > 1:
            title_id = self.titles.pop(0)
        else:
            title_id = self.titles[0] if self.titles else 0
        if not title_id:
            return None
        return DetectionCandidate(title_id=title_id, source=DetectionSource.PROCESS_SCAN)


class OfflineNameCache(NameResolutionCache):
    """Name cache that never touches the network."""

    def _from_store(self, title_id: int) -> str:
        self.remote_calls += 1
        return {480: "Spacewar", 570: "Dota 2"}.get(title_id, "")


@pytest.fixture()
def client():
    return FakePlatformClient()


@pytest.fixture()
def strategy():
    return ScriptedStrategy("scripted", priority=1)


@pytest.fixture()
def engine(client, strategy):
    registry = StrategyRegistry()
    registry.register(strategy)
    return AchievementSyncEngine(
        client,
        registry=registry,
        names=OfflineNameCache(client),
    )


@pytest.fixture()
def recorded(engine):
    """All events emitted by ``engine``, in order."""
    events = []
    engine.events.subscribe(events.append)
    return events


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Fail every HTTP request made through requests.Session."""

    def blocked(self, url, *args, **kwargs):
        raise requests.ConnectionError(f"network disabled in tests: {url}")

    monkeypatch.setattr(requests.Session, "get", blocked)
