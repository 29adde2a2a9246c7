"""Tests for core.name_cache."""

from unittest.mock import MagicMock

import pytest
import requests

from adapters.steam_library import SteamLibrary
from core.name_cache import (
    NameResolutionCache,
    fallback_name,
    normalize_install_name,
)


def _store_session(payload=None, error=None):
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
        return session
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return session


@pytest.mark.parametrize(
    "install_dir,expected",
    [
        ("/games/steamapps/common/half_life-2", "Half Life 2"),
        ("C:\\Steam\\steamapps\\common\\Portal.2\\", "Portal 2"),
        ("/games/common/Spacewar", "Spacewar"),
        ("/games/common/dota  2_beta", "Dota 2 Beta"),
    ],
)
def test_normalize_install_name(install_dir, expected):
    assert normalize_install_name(install_dir) == expected


class TestResolveName:
    def test_install_dir_tier_wins(self, client):
        client.install_dirs = {480: "/games/steamapps/common/space_war"}
        session = _store_session({"480": {"success": True, "data": {"name": "Spacewar"}}})
        cache = NameResolutionCache(client, session=session)

        assert cache.resolve_name(480) == "Space War"
        session.get.assert_not_called()

    def test_store_tier_and_timeout(self, client):
        session = _store_session({"570": {"success": True, "data": {"name": " Dota 2 "}}})
        cache = NameResolutionCache(client, session=session, timeout=5.0)

        assert cache.resolve_name(570) == "Dota 2"
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"appids": 570}
        assert kwargs["timeout"] == 5.0

    def test_at_most_one_remote_call_per_title(self, client):
        session = _store_session({"570": {"success": True, "data": {"name": "Dota 2"}}})
        cache = NameResolutionCache(client, session=session)

        for _ in range(3):
            assert cache.resolve_name(570) == "Dota 2"

        assert session.get.call_count == 1
        assert cache.remote_calls == 1
        assert cache.cached(570) == "Dota 2"

    def test_network_error_falls_back(self, client):
        session = _store_session(error=requests.ConnectionError("offline"))
        cache = NameResolutionCache(client, session=session)

        assert cache.resolve_name(999999) == fallback_name(999999) == "Steam Game 999999"

    def test_unsuccessful_store_entry_falls_back(self, client):
        session = _store_session({"123": {"success": False}})
        cache = NameResolutionCache(client, session=session)

        assert cache.resolve_name(123) == "Steam Game 123"

    def test_fallback_is_cached(self, client):
        session = _store_session(error=requests.Timeout("slow"))
        cache = NameResolutionCache(client, session=session)

        cache.resolve_name(42)
        cache.resolve_name(42)

        assert session.get.call_count == 1
        assert len(cache) == 1

    def test_install_dir_errors_are_tolerated(self, client):
        client.get_install_directory = MagicMock(side_effect=RuntimeError("boom"))
        session = _store_session({"480": {"success": True, "data": {"name": "Spacewar"}}})
        cache = NameResolutionCache(client, session=session)

        assert cache.resolve_name(480) == "Spacewar"

    def test_manifest_tier(self, client, tmp_path):
        steamapps = tmp_path / "steamapps"
        steamapps.mkdir()
        (steamapps / "appmanifest_480.acf").write_text(
            '"AppState"\n{\n\t"appid"\t\t"480"\n\t"name"\t\t"Spacewar"\n'
            '\t"installdir"\t\t"Spacewar"\n}\n'
        )
        session = _store_session(error=requests.ConnectionError("offline"))
        cache = NameResolutionCache(client, library=SteamLibrary(tmp_path), session=session)

        assert cache.resolve_name(480) == "Spacewar"


def test_unreachable_store_uses_fallback_name(client):
    cache = NameResolutionCache(client)

    assert cache.resolve_name(480) == "Steam Game 480"
    assert cache.remote_calls == 1


def test_unreadable_manifest_falls_back(client):
    library = MagicMock(spec=SteamLibrary)
    library.find_manifest.side_effect = PermissionError("library folder not readable")
    session = _store_session(error=requests.ConnectionError("offline"))
    cache = NameResolutionCache(client, library=library, session=session)

    assert cache.resolve_name(480) == "Steam Game 480"
