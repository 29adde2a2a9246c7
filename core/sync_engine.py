"""Achievement synchronization engine for AchieveSync API.

This module provides the engine that runs one detection and sync cycle
at a time: detect the active title, reload its catalog when it changed,
diff unlock state and publish events for consumers.

Example:
    >>> from core.sync_engine import AchievementSyncEngine
    >>> engine = AchievementSyncEngine(client)
    >>> engine.events.subscribe(print)
    >>> engine.run_cycle()
    True
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, List, Optional

from adapters.base import BasePlatformClient, DetectionContext
from adapters.registry import StrategyRegistry
from adapters.steam_library import SteamLibrary
from adapters.strategies.presence import PresenceStrategy
from adapters.strategies.process_scan import ProcessScanStrategy
from core.catalog_loader import AchievementCatalogLoader
from core.events import EventBus
from core.name_cache import NameResolutionCache
from core.profile import ProfileAggregator
from core.session_detector import SessionDetector
from core.state_diff import StateDiffEngine
from models.achievement import (
    AchievementRecord,
    AchievementStats,
    GameSession,
    ProfileSnapshot,
    RarityTier,
    unlock_time_now,
)
from models.events import (
    AchievementUnlocked,
    ProfileUpdated,
    SessionChanged,
    StatusMessage,
)

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_STATUS_HISTORY = 50


def default_registry(library: Optional[SteamLibrary] = None) -> StrategyRegistry:
    """Presence first, then process scan."""
    registry = StrategyRegistry()
    registry.register(PresenceStrategy())
    registry.register(ProcessScanStrategy(library=library))
    return registry


class AchievementSyncEngine:
    """Detection and achievement synchronization engine.

    Owns the active session, the achievement list and the last-known
    unlock state. Cycles are serialized: a cycle requested while
    another one runs is skipped, never queued.

    Attributes:
        events: Event channel for consumers.
        _client: The platform client.
        _detector: Session detector walking the strategy chain.
        _loader: Achievement catalog loader.
        _diff: Unlock transition tracker.
        _profile: Profile aggregator.

    Example:
        >>> engine = AchievementSyncEngine(client)
        >>> engine.run_cycle()
        >>> for record in engine.get_current_achievements():
        ...     print(record.name, record.is_unlocked)
    """

    def __init__(
        self,
        client: BasePlatformClient,
        registry: Optional[StrategyRegistry] = None,
        names: Optional[NameResolutionCache] = None,
        library: Optional[SteamLibrary] = None,
        events: Optional[EventBus] = None,
        status_history: int = DEFAULT_STATUS_HISTORY,
    ) -> None:
        """Initialize the engine.

        Args:
            client: Platform client façade.
            registry: Detection strategies; presence + process scan if None.
            names: Title name cache; one is created if None.
            library: Local Steam library shared by the defaults.
            events: Event bus; one is created if None.
            status_history: Number of recent status messages kept.
        """
        self._client = client
        self.events = events if events is not None else EventBus()
        self._names = (
            names if names is not None else NameResolutionCache(client, library=library)
        )
        self._detector = SessionDetector(
            registry if registry is not None else default_registry(library),
            self._names,
            status=self._warn,
        )
        self._loader = AchievementCatalogLoader(client, status=self._info)
        self._diff = StateDiffEngine()
        self._profile = ProfileAggregator()

        self._client_initialized = False
        self._client_seen_running: Optional[bool] = None
        self._init_attempted = False
        self._player_name = ""
        self._player_id: Optional[int] = None

        self._session: Optional[GameSession] = None
        self._achievements: List[AchievementRecord] = []
        self._latest_profile: Optional[ProfileSnapshot] = None
        self._status_history: Deque[StatusMessage] = deque(maxlen=status_history)

        self._cycle_lock = threading.Lock()
        self._state_lock = threading.RLock()

        logger.info(
            "AchievementSyncEngine instance created",
            extra={"component": "engine"},
        )

    # ------------------------------------------------------------------
    # Status and events
    # ------------------------------------------------------------------

    def _status(self, text: str, level: str = "info") -> None:
        message = StatusMessage(text=text, level=level)
        with self._state_lock:
            self._status_history.append(message)
        log_level = {"info": logging.INFO, "warning": logging.WARNING}.get(level, logging.ERROR)
        logger.log(log_level, text, extra={"component": "engine"})
        self.events.emit(message)

    def _info(self, text: str) -> None:
        self._status(text, "info")

    def _warn(self, text: str) -> None:
        self._status(text, "warning")

    def _publish_profile(self) -> None:
        with self._state_lock:
            snapshot = self._profile.snapshot(self._player_name, self._session, self._achievements)
            self._latest_profile = snapshot
        self.events.emit(ProfileUpdated(snapshot=snapshot))

    # ------------------------------------------------------------------
    # Platform client session
    # ------------------------------------------------------------------

    def _ensure_client(self) -> None:
        """Connect to the platform client, or notice it went away.

        Never raises; an unavailable client means degraded detection.
        """
        try:
            running = bool(self._client.is_client_running())
        except Exception as e:
            self._warn(f"Steam client check failed: {e}")
            running = False

        if not running:
            if self._client_initialized:
                self._client_initialized = False
                self._warn("Steam client stopped - falling back to process scan")
            elif self._client_seen_running is not False:
                self._warn("Steam is not running - using process scan only")
            self._client_seen_running = False
            self._init_attempted = False
            return

        self._client_seen_running = True
        if self._client_initialized or self._init_attempted:
            return

        # One attempt per client run; retried after the client restarts.
        self._init_attempted = True
        self._info("Steam detected - Initializing API")
        try:
            initialized = bool(self._client.initialize_session())
        except Exception as e:
            self._status(f"Steam initialization error: {e}", "error")
            initialized = False

        if not initialized:
            self._warn("Failed to initialize Steam API - using process scan only")
            return

        self._client_initialized = True
        self._info("Steam API initialized successfully")
        self._load_player_profile()

    def _load_player_profile(self) -> None:
        try:
            player_id = int(self._client.get_player_id())
            player_name = self._client.get_player_name() or ""
        except Exception as e:
            self._status(f"Error loading user profile: {e}", "error")
            return

        with self._state_lock:
            self._player_id = player_id
            self._player_name = player_name
        self._info(f"Logged in as: {player_name}")
        self._publish_profile()

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> bool:
        """Run one detect, reload, diff and aggregate cycle.

        Returns:
            False if another cycle was already running (this one was
            skipped), True otherwise. Errors never propagate.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.debug("Cycle already running, skipped", extra={"component": "engine"})
            return False

        try:
            self._cycle()
        except Exception as e:
            logger.exception("Unexpected error in sync cycle", extra={"component": "engine"})
            self._status(f"Error during sync cycle: {e}", "error")
        finally:
            self._cycle_lock.release()
        return True

    def force_refresh(self) -> bool:
        """Run an out-of-band cycle now, unless one is already running."""
        return self.run_cycle()

    @property
    def cycle_running(self) -> bool:
        return self._cycle_lock.locked()

    def _cycle(self) -> None:
        self._ensure_client()
        context = DetectionContext(
            client=self._client,
            client_initialized=self._client_initialized,
            player_id=self._player_id,
        )

        previous = self._session
        session = self._detector.detect(previous, context)

        if session is None:
            if previous is not None or self._achievements:
                self._reset_session()
            return

        if session is not previous:
            self._start_session(session)
            return

        self._sync_unlocks()

    def _reset_session(self) -> None:
        with self._state_lock:
            self._session = None
            self._achievements = []
            self._diff.clear()
        self.events.emit(SessionChanged(name="", title_id=0))
        self._info("No active game detected")
        self._publish_profile()

    def _start_session(self, session: GameSession) -> None:
        with self._state_lock:
            self._session = session
            self._achievements = []
            self._diff.clear()

        self.events.emit(SessionChanged(name=session.display_name, title_id=session.title_id))
        self._info(f"Detected game: {session.display_name} (ID: {session.title_id})")

        records = self._loader.load(session)
        with self._state_lock:
            self._achievements = records
            self._diff.seed(records)
        self._publish_profile()

    def _sync_unlocks(self) -> None:
        with self._state_lock:
            records = list(self._achievements)
        if not records:
            return

        states = self._loader.poll_unlock_states(records)

        with self._state_lock:
            for record in records:
                if record.id not in states:
                    continue
                unlocked, unlock_time = states[record.id]
                if unlocked != record.is_unlocked or (unlocked and unlock_time):
                    record.set_unlock_state(unlocked, unlock_time or record.unlock_timestamp)
            transitions = self._diff.apply(records)
            emitted = [record.model_copy(deep=True) for record in transitions]

        for record in emitted:
            self.events.emit(AchievementUnlocked(record=record))
            self._info(f"Achievement unlocked: {record.name}")

        if emitted:
            self._publish_profile()

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------

    def get_current_achievements(self) -> List[AchievementRecord]:
        """Return a deep copy of the current achievement list."""
        with self._state_lock:
            return [record.model_copy(deep=True) for record in self._achievements]

    def get_current_session(self) -> Optional[GameSession]:
        with self._state_lock:
            return self._session

    def get_latest_profile(self) -> Optional[ProfileSnapshot]:
        with self._state_lock:
            return self._latest_profile

    def get_achievement_stats(self) -> AchievementStats:
        with self._state_lock:
            return self._profile.stats(self._achievements)

    def get_player_name(self) -> str:
        with self._state_lock:
            return self._player_name

    def get_recent_status(self) -> List[StatusMessage]:
        with self._state_lock:
            return list(self._status_history)

    def is_connected(self) -> bool:
        """True when the client session is initialized and still running."""
        if not self._client_initialized:
            return False
        try:
            return bool(self._client.is_client_running())
        except Exception:
            return False

    def simulate_unlock(self) -> AchievementRecord:
        """Emit a synthetic unlock event to test consumer wiring.

        Engine state is not modified.
        """
        with self._state_lock:
            title_id = self._session.title_id if self._session else None
        record = AchievementRecord(
            id="TEST_ACHIEVEMENT",
            name="Steam Integration Working!",
            description="Successfully connected to Steam API and loaded achievements",
            is_unlocked=True,
            unlock_timestamp=unlock_time_now(),
            rarity_tier=RarityTier.EPIC,
            title_id=title_id,
        )
        self.events.emit(AchievementUnlocked(record=record))
        return record

    def shutdown(self) -> None:
        """Release the platform client session."""
        if self._client_initialized:
            try:
                self._client.shutdown()
            except Exception as e:
                logger.warning(
                    f"Platform client shutdown failed: {e}",
                    extra={"component": "engine"},
                )
            self._client_initialized = False

        logger.info(
            "AchievementSyncEngine shutdown complete",
            extra={"component": "engine"},
        )
