"""Pytest configuration and shared fixtures for tube player tests."""

import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest


sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tube_player.http_client_manager import HttpClientManager
from tube_player.settings import Settings
from tube_player.types import BasicInfo, PlayabilityStatus, StreamingData


# ==================== Fake Collaborators ====================


@dataclass
class FakeVideoInfo:
    """Parsed video metadata as produced by the platform parser."""

    basic_info: BasicInfo
    playability_status: Optional[PlayabilityStatus] = field(
        default_factory=lambda: PlayabilityStatus(status="OK")
    )
    streaming_data: Optional[StreamingData] = None
    ustreamer_config: Optional[str] = "ustreamer-config"
    dash_xml: str = '<?xml version="1.0"?><MPD type="static"></MPD>'
    dash_calls: list = field(default_factory=list)

    async def to_dash(self, manifest_options):
        self.dash_calls.append(manifest_options)
        return self.dash_xml


class FakePlatformClient:
    """Platform client answering player requests from a queue of metadata."""

    def __init__(self, responses: list[FakeVideoInfo] | None = None, timeline: list | None = None):
        self.context = {
            "clientName": "WEB",
            "clientVersion": "2.20250101.00.00",
            "osName": "Windows",
            "osVersion": "10.0",
        }
        self.signature_timestamp = 20137
        self.responses = list(responses or [])
        self.requests: list[tuple[str, dict]] = []
        self.parsed_cpns: list[str] = []
        self.deciphered: list[Optional[str]] = []
        self.timeline = timeline if timeline is not None else []

    async def execute(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.requests.append((endpoint, payload))
        self.timeline.append(("client.execute", payload["videoId"]))
        return {"index": len(self.requests) - 1}

    def parse_video_info(self, raw_response: dict[str, Any], cpn: str) -> FakeVideoInfo:
        self.parsed_cpns.append(cpn)
        index = min(raw_response["index"], len(self.responses) - 1)
        return self.responses[index]

    async def decipher(self, url: Optional[str]) -> str:
        self.deciphered.append(url)
        return f"{url}&sig=deciphered"


class FakeClientFactory:
    """Platform client factory failing a configurable number of times."""

    def __init__(self, client: FakePlatformClient, failures: int = 0):
        self.client = client
        self.failures = failures
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, *, cache, http_client):
        self.calls.append({"cache": cache, "http_client": http_client})
        if len(self.calls) <= self.failures:
            raise RuntimeError(f"construction failed #{len(self.calls)}")
        return self.client


class FakeVideoEngine:
    """Video engine recording every call on a shared timeline."""

    def __init__(self, timeline: list | None = None):
        self.timeline = timeline if timeline is not None else []
        self.config: Optional[dict[str, Any]] = None
        self.loaded: list[str] = []
        self.attached = False
        self.destroyed = False

    def configure(self, config):
        self.config = config
        self.timeline.append(("engine.configure",))

    async def attach(self):
        self.attached = True
        self.timeline.append(("engine.attach",))

    async def load(self, manifest_uri):
        self.loaded.append(manifest_uri)
        self.timeline.append(("engine.load", manifest_uri))

    async def unload(self):
        self.timeline.append(("engine.unload",))

    async def destroy(self):
        self.destroyed = True
        self.timeline.append(("engine.destroy",))


class FakeAdapter:
    """SABR streaming adapter recording what it is handed."""

    def __init__(self, client_info, provider, timeline: list):
        self.client_info = client_info
        self.provider = provider
        self.timeline = timeline
        self.streaming_urls: list[str] = []
        self.ustreamer_configs: list[Optional[str]] = []
        self.formats: Optional[list] = None
        self.engine = None
        self.disposed = False

    def set_streaming_url(self, url):
        self.streaming_urls.append(url)
        self.timeline.append(("adapter.set_streaming_url", url))

    def set_ustreamer_config(self, config):
        self.ustreamer_configs.append(config)
        self.timeline.append(("adapter.set_ustreamer_config", config))

    def set_server_abr_formats(self, formats):
        self.formats = formats
        self.timeline.append(("adapter.set_server_abr_formats",))

    def attach(self, engine):
        self.engine = engine
        self.timeline.append(("adapter.attach",))

    def dispose(self):
        self.disposed = True
        self.timeline.append(("adapter.dispose",))


class FakeAdapterFactory:
    def __init__(self, timeline: list | None = None):
        self.timeline = timeline if timeline is not None else []
        self.created: list[FakeAdapter] = []

    def __call__(self, client_info, provider):
        self.timeline.append(("adapter.create",))
        adapter = FakeAdapter(client_info, provider, self.timeline)
        self.created.append(adapter)
        return adapter


class FakeIntegrityMinter:
    """Integrity token minter that can be held open with an event."""

    def __init__(self):
        self.calls: list[str] = []
        self.release = asyncio.Event()
        self.release.set()
        self.fail = False

    async def mint_as_websafe_string(self, binding: str) -> str:
        self.calls.append(binding)
        await self.release.wait()
        if self.fail:
            raise RuntimeError("integrity check failed")
        return f"minted-{binding}"


class FakeMintingEngine:
    def __init__(self, initialized: bool = True):
        self.integrity_minter: Optional[FakeIntegrityMinter] = FakeIntegrityMinter()
        self.initialized = initialized
        self.init_calls = 0
        self.reinit_calls = 0
        self.disposed = False

    async def init(self):
        self.init_calls += 1
        self.initialized = True

    async def reinit(self):
        self.reinit_calls += 1
        self.initialized = True

    def is_initialized(self) -> bool:
        return self.initialized

    def mint_cold_start_token(self, binding: str) -> str:
        return f"cold-{binding}"

    def dispose(self):
        self.disposed = True


class FakeOverlay:
    def __init__(self):
        self.config = None
        self.destroyed = False

    def configure(self, config):
        self.config = config

    def destroy(self):
        self.destroyed = True


class FakeSurface:
    def __init__(self):
        self.removed = False

    def remove(self):
        self.removed = True


# ==================== Metadata Builders ====================


def make_vod_info(video_id: str = "vod123", **overrides) -> FakeVideoInfo:
    """VOD metadata with a SABR streaming URL and two adaptive formats."""
    streaming = StreamingData(
        server_abr_streaming_url=f"https://rr1.example.com/sabr?id={video_id}",
        adaptive_formats=[{"itag": 137}, {"itag": 251}],
    )
    info = FakeVideoInfo(
        basic_info=BasicInfo(id=video_id, title="A video", author="Someone", duration=212.0),
        streaming_data=streaming,
    )
    for key, value in overrides.items():
        setattr(info, key, value)
    return info


def make_live_info(
    video_id: str = "live123",
    dash_url: Optional[str] = "https://manifest.example.com/dash/live",
    hls_url: Optional[str] = "https://manifest.example.com/hls/live.m3u8",
) -> FakeVideoInfo:
    return FakeVideoInfo(
        basic_info=BasicInfo(id=video_id, title="Live now", is_live=True, is_live_content=True),
        streaming_data=StreamingData(
            server_abr_streaming_url=f"https://rr1.example.com/sabr?id={video_id}",
            dash_manifest_url=dash_url,
            hls_manifest_url=hls_url,
        ),
    )


def make_dvr_info(
    video_id: str = "dvr123",
    dash_url: Optional[str] = "https://manifest.example.com/dash/dvr",
    hls_url: Optional[str] = "https://manifest.example.com/hls/dvr.m3u8",
) -> FakeVideoInfo:
    return FakeVideoInfo(
        basic_info=BasicInfo(
            id=video_id, title="Was live", is_post_live_dvr=True, is_live_content=True
        ),
        streaming_data=StreamingData(
            server_abr_streaming_url=f"https://rr1.example.com/sabr?id={video_id}",
            dash_manifest_url=dash_url,
            hls_manifest_url=hls_url,
        ),
    )


# ==================== Fixtures ====================


@pytest.fixture
def timeline() -> list:
    """Shared call log for ordering assertions."""
    return []


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        proxy_origin="https://proxy.example.com/",
        session_id="test-session",
        session_store_path=tmp_path / "session-id",
        skip_proxy=False,
        max_retries=3,
    )


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def mock_transport(recorded_requests) -> httpx.MockTransport:
    """Network hop answering every request with an empty JSON body."""

    def handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        return httpx.Response(200, json={})

    return httpx.MockTransport(handler)


@pytest.fixture
def http_clients(settings, mock_transport) -> HttpClientManager:
    return HttpClientManager(settings, base_transport=mock_transport)


@pytest.fixture
def platform_client(timeline) -> FakePlatformClient:
    return FakePlatformClient([make_vod_info()], timeline=timeline)


@pytest.fixture
def video_engine(timeline) -> FakeVideoEngine:
    return FakeVideoEngine(timeline)


@pytest.fixture
def adapter_factory(timeline) -> FakeAdapterFactory:
    return FakeAdapterFactory(timeline)


@pytest.fixture
def minting_engine() -> FakeMintingEngine:
    return FakeMintingEngine()
