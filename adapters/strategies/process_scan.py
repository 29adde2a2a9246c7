"""Process-scan session detection strategy.

Enumerates running processes and looks for an executable living under
a Steam library (``steamapps/common/<game>/...``). The title id comes
from a ``steam_appid.txt`` sidecar when the game ships one, otherwise
from path heuristics: a Proton ``compatdata/<id>`` segment, or the app
manifest whose ``installdir`` matches the game directory.

Steam's own compatibility tools and runtimes (Proton, the Linux
runtime) also live under ``steamapps/common``. They are never games;
when a process runs from one, its command line names the real game.

Example:
    >>> strategy = ProcessScanStrategy(config={"exclude_names": ["steam.exe"]})
    >>> candidate = strategy.detect(context)
"""

from __future__ import annotations

import fnmatch
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import psutil

from adapters.base import BaseDetectionStrategy, DetectionCandidate, DetectionContext
from adapters.steam_client import DEFAULT_CLIENT_PROCESS_NAMES, DEFAULT_CLIENT_TOOL_DIRS
from adapters.steam_library import SteamLibrary
from models.achievement import DetectionSource

# Configure logging
logger = logging.getLogger(__name__)

SIDECAR_FILE_NAME = "steam_appid.txt"
_SIDECAR_ID_RE = re.compile(r"\b(\d+)\b")
_PATH_SPLIT_RE = re.compile(r"[\\/]+")


def split_path(path: str) -> List[str]:
    """Split a Windows or POSIX path string into its segments."""
    return _PATH_SPLIT_RE.split(path)


def _steamapps_index(lowered: List[str]) -> Optional[int]:
    """Index of the last ``steamapps`` segment, or None."""
    if "steamapps" not in lowered:
        return None
    return len(lowered) - 1 - lowered[::-1].index("steamapps")


def join_path(parts: Iterable[str]) -> Path:
    return Path("/".join(parts))


def read_sidecar_title_id(sidecar: Path) -> Optional[int]:
    """Return the first positive integer in a steam_appid.txt file."""
    try:
        content = sidecar.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _SIDECAR_ID_RE.search(content)
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    return None


class ProcessScanStrategy(BaseDetectionStrategy):
    """Detect the active title by scanning running executables.

    Attributes:
        name: "process_scan"
        priority: 2 (after presence)
        requires_client: False - runs in degraded mode too.

    Example:
        >>> strategy = ProcessScanStrategy(library=SteamLibrary(Path("/opt/steam")))
    """

    name = "process_scan"
    priority = 2
    requires_client = False

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        library: Optional[SteamLibrary] = None,
    ) -> None:
        """Initialize the process scan strategy.

        Args:
            config: Configuration dict with keys:
                - exclude_names: Process names of the platform client
                  itself, never treated as games.
                - exclude_tool_dirs: Glob patterns of ``steamapps/common``
                  dirs holding Steam's own tools (Proton, runtimes).
            library: Steam library used for manifest heuristics.
        """
        super().__init__(config)
        exclude = self.config.get("exclude_names", DEFAULT_CLIENT_PROCESS_NAMES)
        self.exclude_names = {name.lower() for name in exclude}
        tool_dirs = self.config.get("exclude_tool_dirs", DEFAULT_CLIENT_TOOL_DIRS)
        self.tool_dirs = [pattern.lower() for pattern in tool_dirs]
        self.library = library or SteamLibrary()

    def detect(self, context: DetectionContext) -> Optional[DetectionCandidate]:
        for proc in psutil.process_iter(["name", "exe", "cmdline"]):
            try:
                candidate = self._inspect_process(proc.info)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            except OSError as e:
                logger.debug(
                    f"Skipping process, path inspection failed: {e}",
                    extra={"component": "strategy", "strategy": self.name},
                )
                continue

            if candidate is None:
                continue

            if not self.verify_ownership(context, candidate.title_id):
                logger.info(
                    f"Process candidate {candidate.title_id} rejected, not owned",
                    extra={"component": "strategy", "strategy": self.name},
                )
                continue

            return candidate

        return None

    def _inspect_process(self, info: Dict[str, Any]) -> Optional[DetectionCandidate]:
        name = (info.get("name") or "").lower()
        if name in self.exclude_names:
            return None

        exe = info.get("exe") or ""
        cmdline = [arg for arg in info.get("cmdline") or [] if arg]
        if exe and not self.is_tool_path(exe):
            return self.candidate_from_path(exe)

        # Proton and the Steam runtime run the game as one of their arguments.
        for arg in cmdline if exe else cmdline[:1]:
            candidate = self.candidate_from_path(arg)
            if candidate is not None:
                return candidate
        return None

    def is_tool_path(self, path: str) -> bool:
        """True if *path* lives in a Steam compatibility tool or runtime dir."""
        lowered = [part.lower() for part in split_path(path)]
        index = _steamapps_index(lowered)
        if index is None:
            return False
        tail = lowered[index + 1:]
        return len(tail) >= 2 and tail[0] == "common" and self._is_tool_dir(tail[1])

    def _is_tool_dir(self, install_dir: str) -> bool:
        name = install_dir.lower()
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.tool_dirs)

    def candidate_from_path(self, exe: str) -> Optional[DetectionCandidate]:
        """Resolve a title id from an executable path, if it is a game.

        Args:
            exe: Absolute executable path.

        Returns:
            A candidate, or None when the path is not under a library.
        """
        parts = split_path(exe)
        lowered = [part.lower() for part in parts]
        index = _steamapps_index(lowered)
        if index is None:
            return None

        tail = lowered[index + 1:]
        if len(tail) < 2:
            return None

        if tail[0] == "compatdata" and tail[1].isdigit() and int(tail[1]) > 0:
            return DetectionCandidate(
                title_id=int(tail[1]),
                source=DetectionSource.PROCESS_SCAN,
                evidence=exe,
            )

        if tail[0] != "common" or len(tail) < 3:
            return None
        if self._is_tool_dir(tail[1]):
            return None

        install_root = index + 2
        title_id = self._sidecar_title_id(parts, install_root)
        if title_id:
            return DetectionCandidate(
                title_id=title_id,
                source=DetectionSource.INSTALL_DIR_FILE,
                evidence=exe,
            )

        steamapps = join_path(parts[: index + 1])
        title_id = self.library.title_id_for_install_dir(steamapps, parts[install_root])
        if title_id:
            return DetectionCandidate(
                title_id=title_id,
                source=DetectionSource.PROCESS_SCAN,
                evidence=exe,
            )
        return None

    @staticmethod
    def _sidecar_title_id(parts: List[str], install_root: int) -> Optional[int]:
        # Walk from the executable's directory up to the game's install root.
        for depth in range(len(parts) - 1, install_root, -1):
            sidecar = join_path(parts[:depth]) / SIDECAR_FILE_NAME
            if sidecar.is_file():
                title_id = read_sidecar_title_id(sidecar)
                if title_id:
                    return title_id
        return None
