"""Local Steam platform client.

A :class:`BasePlatformClient` that only uses what is observable without
a Steamworks binding: whether the Steam process is running and what
the local library folders contain. Presence and stats queries are not
available, so ``initialize_session`` always reports failure and the
engine runs in degraded (process-scan only) mode.

Deployments with a Steamworks binding subclass this client and
override the session, presence and stats methods.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import psutil

from adapters.base import BasePlatformClient, PlatformClientError
from adapters.steam_library import SteamLibrary

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CLIENT_PROCESS_NAMES = (
    "steam.exe",
    "steam",
    "steamwebhelper.exe",
    "steamwebhelper",
    "steamservice.exe",
    "steam_osx",
)

# Install dirs under steamapps/common that hold Steam's own compatibility
# tools and runtimes, not games. Matched case-insensitively as globs.
DEFAULT_CLIENT_TOOL_DIRS = (
    "Proton*",
    "SteamLinuxRuntime*",
    "Steam Linux Runtime*",
    "Steamworks Shared",
)


class LocalSteamClient(BasePlatformClient):
    """Steam client façade backed by the local installation only.

    Attributes:
        library: The Steam library view used for install lookups.
        process_names: Executable names identifying the Steam client.
    """

    def __init__(
        self,
        library: Optional[SteamLibrary] = None,
        process_names: Iterable[str] = DEFAULT_CLIENT_PROCESS_NAMES,
    ) -> None:
        self.library = library or SteamLibrary()
        self.process_names = {name.lower() for name in process_names}

    def is_client_running(self) -> bool:
        try:
            for proc in psutil.process_iter(["name"]):
                proc_name = (proc.info.get("name") or "").lower()
                if proc_name in self.process_names:
                    return True
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            pass
        return False

    def initialize_session(self) -> bool:
        logger.info(
            "No Steamworks binding available, presence and stats disabled",
            extra={"component": "steam_client"},
        )
        return False

    def get_player_name(self) -> str:
        return ""

    def get_player_id(self) -> int:
        return 0

    def get_owned_title_id_from_presence(self, player_id: int) -> Optional[int]:
        raise PlatformClientError("presence is not available without a client session")

    def is_title_owned(self, title_id: int) -> bool:
        return self.library.find_manifest(title_id) is not None

    def request_stats_refresh(self) -> bool:
        return False

    def get_achievement_count(self) -> int:
        return 0

    def get_achievement_id_at(self, index: int) -> str:
        raise PlatformClientError("achievement stats are not available")

    def get_achievement_unlock_state(self, achievement_id: str) -> Tuple[bool, Optional[int]]:
        raise PlatformClientError("achievement stats are not available")

    def get_achievement_display_attribute(
        self, achievement_id: str, attribute_name: str
    ) -> Optional[str]:
        return None

    def get_install_directory(self, title_id: int) -> Optional[str]:
        folder = self.library.install_directory(title_id)
        return str(folder) if folder else None
