"""Title name resolution with a process-lifetime cache.

Resolves a numeric title id to a display name by trying, in order:

1. the install directory reported by the platform client (normalized),
2. the Steam store ``appdetails`` endpoint (time-boxed),
3. the local ``appmanifest_<id>.acf`` written by the Steam client,
4. a deterministic ``"Steam Game <id>"`` fallback.

The first non-empty answer is cached and never invalidated, so each
title id costs at most one remote request per cache instance.

Example:
    >>> cache = NameResolutionCache(client, library=SteamLibrary())
    >>> cache.resolve_name(480)
    'Spacewar'
"""

from __future__ import annotations

import logging
import re
import threading
from pathlib import PurePath
from typing import Dict, Optional

import requests

from adapters.base import BasePlatformClient
from adapters.steam_library import SteamLibrary

# Configure logging
logger = logging.getLogger(__name__)

STORE_APPDETAILS_URL = "https://store.steampowered.com/api/appdetails"
DEFAULT_LOOKUP_TIMEOUT = 5.0  # seconds

_SEPARATORS_RE = re.compile(r"[_\-.]+")
_WHITESPACE_RE = re.compile(r"\s+")


def fallback_name(title_id: int) -> str:
    return f"Steam Game {title_id}"


def normalize_install_name(install_dir: str) -> str:
    """Turn an install directory into a presentable title name.

    Separators become spaces, whitespace is collapsed and the result is
    title-cased: ``/games/common/half_life-2`` -> ``"Half Life 2"``.
    """
    base = PurePath(install_dir.replace("\\", "/").rstrip("/")).name
    spaced = _SEPARATORS_RE.sub(" ", base)
    return _WHITESPACE_RE.sub(" ", spaced).strip().title()


class NameResolutionCache:
    """Memoizing title-name resolver.

    One instance is owned by the engine for the whole process lifetime;
    tests construct their own instance with injected collaborators.

    Attributes:
        timeout: Remote lookup timeout in seconds.
        remote_calls: Number of remote lookups performed so far.
    """

    def __init__(
        self,
        client: BasePlatformClient,
        library: Optional[SteamLibrary] = None,
        session: Optional[requests.Session] = None,
        store_url: str = STORE_APPDETAILS_URL,
        timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    ) -> None:
        """Initialize the cache.

        Args:
            client: Platform client used for install-directory lookups.
            library: Local Steam library for manifest lookups.
            session: HTTP session for store lookups.
            store_url: Store ``appdetails`` endpoint.
            timeout: Bounded timeout for the remote lookup, in seconds.
        """
        self._client = client
        self._library = library
        self._session = session or requests.Session()
        self._store_url = store_url
        self.timeout = timeout
        self.remote_calls = 0
        self._names: Dict[int, str] = {}
        self._lock = threading.Lock()

    def resolve_name(self, title_id: int) -> str:
        """Resolve and cache the display name of *title_id*.

        Args:
            title_id: Numeric title identifier.

        Returns:
            The display name; never empty and never raises.
        """
        with self._lock:
            cached = self._names.get(title_id)
            if cached is not None:
                return cached

            name = (
                self._from_install_dir(title_id)
                or self._from_store(title_id)
                or self._from_manifest(title_id)
                or fallback_name(title_id)
            )
            self._names[title_id] = name

        logger.info(
            f"Resolved title {title_id} to '{name}'",
            extra={"component": "name_cache", "title_id": title_id},
        )
        return name

    def cached(self, title_id: int) -> Optional[str]:
        with self._lock:
            return self._names.get(title_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    # ------------------------------------------------------------------
    # Resolution tiers
    # ------------------------------------------------------------------

    def _from_install_dir(self, title_id: int) -> str:
        try:
            install_dir = self._client.get_install_directory(title_id)
        except Exception as e:
            logger.debug(f"Install directory lookup failed for {title_id}: {e}")
            return ""
        return normalize_install_name(install_dir) if install_dir else ""

    def _from_store(self, title_id: int) -> str:
        self.remote_calls += 1
        try:
            resp = self._session.get(
                self._store_url,
                params={"appids": title_id},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                f"Store lookup failed for title {title_id}: {e}",
                extra={"component": "name_cache", "title_id": title_id},
            )
            return ""

        entry = data.get(str(title_id)) if isinstance(data, dict) else None
        if not isinstance(entry, dict) or not entry.get("success"):
            return ""
        name = (entry.get("data") or {}).get("name")
        return name.strip() if isinstance(name, str) else ""

    def _from_manifest(self, title_id: int) -> str:
        if self._library is None:
            return ""
        try:
            manifest = self._library.find_manifest(title_id)
        except Exception as e:
            logger.debug(f"Manifest lookup failed for {title_id}: {e}")
            return ""
        return (manifest or {}).get("name", "").strip()
