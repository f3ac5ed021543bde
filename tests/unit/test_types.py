"""Unit tests for shared value types."""

import base64

from tube_player.cache import SessionCache
from tube_player.types import ClientInfo, InlineDashManifest, ManifestOptions


class TestClientInfo:
    def test_from_context_maps_client_name(self):
        info = ClientInfo.from_context(
            {
                "clientName": "TVHTML5",
                "clientVersion": "7.20250101",
                "osName": "Linux",
                "osVersion": "6.1",
            }
        )

        assert info == ClientInfo("Linux", "6.1", 7, "7.20250101")

    def test_unknown_client_name(self):
        assert ClientInfo.from_context({"clientName": "NOPE"}).client_name is None
        assert ClientInfo.from_context({}).client_name is None


class TestManifestTypes:
    def test_inline_manifest_uri(self):
        manifest = InlineDashManifest.from_xml("<MPD/>")

        assert manifest.uri == "data:application/dash+xml;base64," + base64.b64encode(b"<MPD/>").decode()

    def test_manifest_options_dict(self):
        assert ManifestOptions().to_dict() == {
            "is_sabr": True,
            "captions_format": "vtt",
            "include_thumbnails": False,
        }


class TestSessionCache:
    def test_enabled_cache(self):
        cache = SessionCache()
        cache.set("player", "script")

        assert cache.get("player") == "script"
        assert len(cache) == 1

    def test_disabled_cache_always_misses(self):
        cache = SessionCache(enabled=False)
        cache.set("player", "script")

        assert cache.get("player") is None
