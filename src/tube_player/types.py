"""Value types shared by the resolver, bridge and orchestrator."""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


LIVE_MANIFEST_SUFFIX = "/mpd_version/7"
DASH_MIME_TYPE = "application/dash+xml"

# Platform client names and the numeric ids the streaming adapter expects.
CLIENT_NAME_IDS: dict[str, int] = {
    "WEB": 1,
    "MWEB": 2,
    "ANDROID": 3,
    "IOS": 5,
    "TVHTML5": 7,
    "WEB_EMBEDDED_PLAYER": 56,
    "WEB_REMIX": 67,
    "WEB_CREATOR": 62,
    "TVHTML5_SIMPLY_EMBEDDED_PLAYER": 85,
}


class DeliveryMode(str, Enum):
    """How a video is delivered, and therefore which manifest branch applies."""

    LIVE = "live"
    POST_LIVE_DVR = "post_live_dvr"
    VOD = "vod"


@dataclass(frozen=True)
class VideoClassification:
    """Delivery classification derived once per load from platform flags."""

    is_live: bool = False
    is_post_live_dvr: bool = False

    @property
    def mode(self) -> DeliveryMode:
        """Branch-selection mode; live wins when both flags are set."""
        if self.is_live:
            return DeliveryMode.LIVE
        if self.is_post_live_dvr:
            return DeliveryMode.POST_LIVE_DVR
        return DeliveryMode.VOD


@dataclass(frozen=True)
class DashManifestUrl:
    """Remote DASH manifest."""

    url: str

    @property
    def uri(self) -> str:
        return self.url


@dataclass(frozen=True)
class HlsManifestUrl:
    """Remote HLS playlist."""

    url: str

    @property
    def uri(self) -> str:
        return self.url


@dataclass(frozen=True)
class InlineDashManifest:
    """DASH manifest generated locally, carried as a base64 payload."""

    payload: str

    @classmethod
    def from_xml(cls, manifest_xml: str) -> "InlineDashManifest":
        return cls(payload=base64.b64encode(manifest_xml.encode("utf-8")).decode("ascii"))

    @property
    def uri(self) -> str:
        return f"data:{DASH_MIME_TYPE};base64,{self.payload}"


ManifestDescriptor = Union[DashManifestUrl, HlsManifestUrl, InlineDashManifest]


@dataclass(frozen=True)
class ManifestOptions:
    """Options for generating an inline DASH manifest from metadata."""

    is_sabr: bool = True
    captions_format: str = "vtt"
    include_thumbnails: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_sabr": self.is_sabr,
            "captions_format": self.captions_format,
            "include_thumbnails": self.include_thumbnails,
        }


@dataclass(frozen=True)
class ClientInfo:
    """Client identity handed to the streaming adapter."""

    os_name: str | None
    os_version: str | None
    client_name: int | None
    client_version: str | None

    @classmethod
    def from_context(cls, context: dict[str, Any]) -> "ClientInfo":
        """Build from a platform client context (``context.client`` mapping)."""
        client_name = context.get("clientName")
        return cls(
            os_name=context.get("osName"),
            os_version=context.get("osVersion"),
            client_name=CLIENT_NAME_IDS.get(client_name) if client_name else None,
            client_version=context.get("clientVersion"),
        )


@dataclass
class BasicInfo:
    """Basic video details reported by the platform."""

    id: str
    title: str | None = None
    author: str | None = None
    duration: float | None = None
    is_live: bool = False
    is_post_live_dvr: bool = False
    is_live_content: bool = False
    thumbnail: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class PlayabilityStatus:
    """Playability verdict for the requested content."""

    status: str
    reason: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.status == "OK"


@dataclass
class StreamingData:
    """Streaming endpoints reported by the platform."""

    server_abr_streaming_url: str | None = None
    dash_manifest_url: str | None = None
    hls_manifest_url: str | None = None
    adaptive_formats: list[Any] = field(default_factory=list)


__all__ = [
    "LIVE_MANIFEST_SUFFIX",
    "DASH_MIME_TYPE",
    "CLIENT_NAME_IDS",
    "DeliveryMode",
    "VideoClassification",
    "DashManifestUrl",
    "HlsManifestUrl",
    "InlineDashManifest",
    "ManifestDescriptor",
    "ManifestOptions",
    "ClientInfo",
    "BasicInfo",
    "PlayabilityStatus",
    "StreamingData",
]
