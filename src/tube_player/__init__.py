"""
Tube Player Package

Client-side playback session orchestrator: turns a content id into a playing
adaptive-streaming session against the video platform's internal API.

This package provides:
- TubePlayer: Orchestrator exposing initialize / load_video / destroy
- SessionInitializer: Platform client construction with bounded retries
- TokenMinter: Proof-of-origin token lifecycle under a single-slot lock
- PlaybackResolver: Delivery classification and manifest resolution
- StreamingBridge: Token and reload callbacks for the streaming adapter
- ProxyTransport: httpx transport forwarding traffic through the proxy

Usage:
    from tube_player import TubePlayer

    async with TubePlayer(engine, create_client, create_adapter, minting_engine) as player:
        info = await player.load_video("dQw4w9WgXcQ")
        print(info.title)
"""

from .bridge import StreamingBridge, build_player_request
from .cache import SessionCache
from .exceptions import (
    InitializationError,
    ManifestResolutionError,
    PlayabilityError,
    PlaybackError,
    ProxyTransportError,
    TokenMintingError,
    TubePlayerError,
)
from .http_client_manager import HttpClientManager
from .initializer import ClientHandle, SessionInitializer
from .log_config import configure_logging
from .playback_session import PlaybackSession, PlaybackStatus, generate_cpn
from .player import TubePlayer
from .resolver import PlaybackResolver, classify
from .settings import Settings, get_settings
from .token_minter import TokenMinter, TokenRecord, TokenState
from .transport import CacheBuster, CacheBustingTransport, ProxyTransport
from .types import (
    BasicInfo,
    ClientInfo,
    DashManifestUrl,
    DeliveryMode,
    HlsManifestUrl,
    InlineDashManifest,
    ManifestDescriptor,
    ManifestOptions,
    PlayabilityStatus,
    StreamingData,
    VideoClassification,
)

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "TubePlayer",
    "SessionInitializer",
    "ClientHandle",
    "TokenMinter",
    "PlaybackResolver",
    "StreamingBridge",
    "HttpClientManager",
    "SessionCache",
    # Transport
    "ProxyTransport",
    "CacheBustingTransport",
    "CacheBuster",
    # Session state
    "PlaybackSession",
    "PlaybackStatus",
    "TokenRecord",
    "TokenState",
    # Value types
    "BasicInfo",
    "ClientInfo",
    "DashManifestUrl",
    "DeliveryMode",
    "HlsManifestUrl",
    "InlineDashManifest",
    "ManifestDescriptor",
    "ManifestOptions",
    "PlayabilityStatus",
    "StreamingData",
    "VideoClassification",
    # Helpers
    "build_player_request",
    "classify",
    "generate_cpn",
    # Configuration
    "Settings",
    "get_settings",
    "configure_logging",
    # Errors
    "TubePlayerError",
    "InitializationError",
    "PlaybackError",
    "PlayabilityError",
    "ManifestResolutionError",
    "ProxyTransportError",
    "TokenMintingError",
    # Package metadata
    "__version__",
]
