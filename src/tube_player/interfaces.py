"""
Collaborator Protocols

Interfaces of the components the orchestrator drives but does not implement:
the platform API client and its parser, the token minting engine, the SABR
streaming adapter and the video engine. Anything satisfying these protocols
structurally can be injected into ``TubePlayer``.
"""

from typing import Any, Optional, Protocol

import httpx

from .cache import SessionCache
from .types import BasicInfo, ClientInfo, PlayabilityStatus, StreamingData


class VideoMetadata(Protocol):
    """Structured video metadata produced by the platform response parser."""

    basic_info: BasicInfo
    playability_status: Optional[PlayabilityStatus]
    streaming_data: Optional[StreamingData]
    ustreamer_config: Optional[str]

    async def to_dash(self, manifest_options: dict[str, Any]) -> str:
        """Generate a DASH manifest document from this metadata.

        ``manifest_options`` is the mapping produced by ``ManifestOptions.to_dict()``.
        """
        ...


class PlatformClient(Protocol):
    """
    Platform API client.

    Response parsing and signature deciphering live behind this interface.

    Attributes:
        context: ``context.client`` mapping of the session (osName,
            osVersion, clientName, clientVersion)
        signature_timestamp: Signature timestamp of the loaded player script
    """

    context: dict[str, Any]
    signature_timestamp: Optional[int]

    async def execute(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Issue an API request and return the raw response body."""
        ...

    def parse_video_info(self, raw_response: dict[str, Any], cpn: str) -> VideoMetadata:
        """Turn a raw player response into structured metadata."""
        ...

    async def decipher(self, url: Optional[str]) -> str:
        """Decipher a signed streaming URL."""
        ...


class PlatformClientFactory(Protocol):
    """Constructs a platform client; may fail and be retried."""

    async def __call__(
        self, *, cache: SessionCache, http_client: httpx.AsyncClient
    ) -> PlatformClient:
        ...


class IntegrityTokenMinter(Protocol):
    async def mint_as_websafe_string(self, binding: str) -> str:
        ...


class MintingEngine(Protocol):
    """Proof-of-origin token minting engine."""

    integrity_minter: Optional[IntegrityTokenMinter]

    async def init(self) -> None:
        ...

    async def reinit(self) -> None:
        ...

    def is_initialized(self) -> bool:
        ...

    def mint_cold_start_token(self, binding: str) -> str:
        ...

    def dispose(self) -> None:
        ...


class PlaybackDataProvider(Protocol):
    """
    Capability the streaming adapter calls back into.

    Implemented by the streaming bridge and injected into the adapter at
    construction time.
    """

    async def mint_token(self) -> str:
        """Return the best available proof-of-origin token."""
        ...

    async def reload_playback_data(self, reload_context: dict[str, Any]) -> None:
        """Fetch fresh playback data and apply it to the adapter."""
        ...


class VideoEngine(Protocol):
    """Adaptive-bitrate video engine (black box)."""

    def configure(self, config: dict[str, Any]) -> None:
        ...

    async def attach(self) -> None:
        ...

    async def load(self, manifest_uri: str) -> None:
        ...

    async def unload(self) -> None:
        ...

    async def destroy(self) -> None:
        ...


class StreamingAdapter(Protocol):
    """SABR streaming adapter sitting between the video engine and the platform."""

    def set_streaming_url(self, url: str) -> None:
        ...

    def set_ustreamer_config(self, config: Optional[str]) -> None:
        ...

    def set_server_abr_formats(self, formats: list[Any]) -> None:
        ...

    def attach(self, engine: VideoEngine) -> None:
        ...

    def dispose(self) -> None:
        ...


class StreamingAdapterFactory(Protocol):
    def __call__(
        self, client_info: ClientInfo, provider: PlaybackDataProvider
    ) -> StreamingAdapter:
        ...


class Overlay(Protocol):
    """UI overlay drawn over the video surface."""

    def configure(self, config: dict[str, Any]) -> None:
        ...

    def destroy(self) -> None:
        ...


class VideoSurface(Protocol):
    def remove(self) -> None:
        ...


__all__ = [
    "VideoMetadata",
    "PlatformClient",
    "PlatformClientFactory",
    "IntegrityTokenMinter",
    "MintingEngine",
    "PlaybackDataProvider",
    "VideoEngine",
    "StreamingAdapter",
    "StreamingAdapterFactory",
    "Overlay",
    "VideoSurface",
]
