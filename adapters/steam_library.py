"""Steam library discovery and app manifest parsing.

Locates the Steam installation, enumerates every library folder listed
in ``libraryfolders.vdf`` and reads ``appmanifest_<id>.acf`` files. The
helpers only touch the local filesystem; they never talk to Steam.

Example:
    >>> from adapters.steam_library import SteamLibrary
    >>> library = SteamLibrary()
    >>> manifest = library.find_manifest(480)
    >>> manifest.get("name") if manifest else None
    'Spacewar'
"""

from __future__ import annotations

import logging
import os
import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Configure logging
logger = logging.getLogger(__name__)

_VDF_PAIR_RE = re.compile(r'^\s*"([^"]+)"\s+"((?:[^"\\]|\\.)*)"', re.MULTILINE)
_VDF_PATH_RE = re.compile(r'"path"\s+"((?:[^"\\]|\\.)*)"')


def parse_acf(content: str) -> Dict[str, str]:
    """Parse the flat key/value pairs of an ACF/VDF document.

    Nested sections are flattened; the first occurrence of a key wins,
    which for app manifests is the top-level ``AppState`` value.

    Args:
        content: Raw file content.

    Returns:
        Dict of lower-cased keys to unescaped values.
    """
    values: Dict[str, str] = {}
    for key, value in _VDF_PAIR_RE.findall(content):
        values.setdefault(key.lower(), value.replace("\\\\", "\\"))
    return values


def default_steam_roots() -> List[Path]:
    """Return the conventional Steam install locations for this OS."""
    if sys.platform.startswith("win"):
        return [
            Path(os.environ.get("PROGRAMFILES(X86)", "C:/Program Files (x86)")) / "Steam",
            Path(os.environ.get("PROGRAMFILES", "C:/Program Files")) / "Steam",
            Path("D:/Steam"),
            Path("D:/SteamLibrary"),
        ]
    if sys.platform == "darwin":
        return [Path.home() / "Library/Application Support/Steam"]
    return [
        Path.home() / ".steam/steam",
        Path.home() / ".local/share/Steam",
        Path.home() / ".var/app/com.valvesoftware.Steam/.local/share/Steam",
    ]


class SteamLibrary:
    """Read-only view over the local Steam library folders.

    Attributes:
        steam_root: The Steam installation directory, if found.
    """

    def __init__(self, steam_root: Optional[Path] = None) -> None:
        """Initialize the library view.

        Args:
            steam_root: Explicit Steam installation directory. If None,
                the conventional locations are searched.
        """
        self.steam_root: Optional[Path] = steam_root or self._find_steam_root()

    @staticmethod
    def _find_steam_root() -> Optional[Path]:
        for candidate in default_steam_roots():
            try:
                if (candidate / "steamapps").is_dir():
                    return candidate
            except OSError:
                continue
        return None

    def library_folders(self) -> List[Path]:
        """Return every ``steamapps`` directory known to this install.

        Returns:
            Existing ``steamapps`` directories, main library first.
        """
        if self.steam_root is None:
            return []

        main_steamapps = self.steam_root / "steamapps"
        folders: List[Path] = []
        if main_steamapps.is_dir():
            folders.append(main_steamapps)

        for vdf_path in (
            main_steamapps / "libraryfolders.vdf",
            self.steam_root / "config" / "libraryfolders.vdf",
        ):
            if not vdf_path.is_file():
                continue
            try:
                content = vdf_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning(
                    f"Failed to read {vdf_path}: {e}",
                    extra={"component": "steam_library"},
                )
                continue

            for raw_path in _VDF_PATH_RE.findall(content):
                steamapps = Path(raw_path.replace("\\\\", "\\")) / "steamapps"
                if steamapps.is_dir() and steamapps not in folders:
                    folders.append(steamapps)

        return folders

    def read_manifest(self, manifest_path: Path) -> Dict[str, str]:
        """Parse one app manifest, returning {} when unreadable."""
        try:
            return parse_acf(manifest_path.read_text(encoding="utf-8", errors="replace"))
        except OSError as e:
            logger.debug(f"Failed to read manifest {manifest_path}: {e}")
            return {}

    def find_manifest(self, title_id: int) -> Optional[Dict[str, str]]:
        """Find and parse ``appmanifest_<title_id>.acf`` in any library."""
        for steamapps in self.library_folders():
            manifest_path = steamapps / f"appmanifest_{title_id}.acf"
            if manifest_path.is_file():
                manifest = self.read_manifest(manifest_path)
                if manifest:
                    manifest["_steamapps"] = str(steamapps)
                    return manifest
        return None

    def install_directory(self, title_id: int) -> Optional[Path]:
        """Return ``steamapps/common/<installdir>`` for *title_id*."""
        manifest = self.find_manifest(title_id)
        if not manifest or not manifest.get("installdir"):
            return None
        folder = Path(manifest["_steamapps"]) / "common" / manifest["installdir"]
        return folder if folder.is_dir() else None

    def title_id_for_install_dir(self, steamapps: Path, install_dir: str) -> Optional[int]:
        """Find the title whose manifest ``installdir`` is *install_dir*.

        Args:
            steamapps: The ``steamapps`` directory containing the game.
            install_dir: The directory name under ``steamapps/common``.

        Returns:
            The title id, or None when no manifest matches.
        """
        wanted = install_dir.lower()
        try:
            manifests = sorted(steamapps.glob("appmanifest_*.acf"))
        except OSError:
            return None

        for manifest_path in manifests:
            manifest = self.read_manifest(manifest_path)
            if manifest.get("installdir", "").lower() != wanted:
                continue
            app_id = manifest.get("appid", "")
            if not app_id.isdigit():
                match = re.search(r"appmanifest_(\d+)\.acf$", manifest_path.name)
                app_id = match.group(1) if match else ""
            if app_id.isdigit() and int(app_id) > 0:
                return int(app_id)
        return None
