"""
Playback Resolver

Classifies a video's delivery mode and resolves it to exactly one manifest
descriptor:

- live: DASH manifest URL with the ``/mpd_version/7`` suffix, else HLS
- post-live DVR: HLS playlist, else suffixed DASH manifest URL
- VOD: inline SABR DASH manifest generated from the metadata itself
"""

from typing import Awaitable, Callable, Optional

from .events import PlayerEvents
from .exceptions import ManifestResolutionError, PlayabilityError
from .interfaces import VideoMetadata
from .log_config import get_context_logger
from .types import (
    LIVE_MANIFEST_SUFFIX,
    DashManifestUrl,
    DeliveryMode,
    HlsManifestUrl,
    InlineDashManifest,
    ManifestDescriptor,
    ManifestOptions,
    StreamingData,
    VideoClassification,
)


SABR_MANIFEST_OPTIONS = ManifestOptions(is_sabr=True, captions_format="vtt", include_thumbnails=False)


def classify(metadata: VideoMetadata) -> VideoClassification:
    """
    Derive the delivery classification from platform flags.

    A live-originated video that still exposes a DASH or HLS manifest is
    treated as post-live DVR even when the platform does not flag it so.
    """
    info = metadata.basic_info
    streaming = metadata.streaming_data
    has_manifest_url = bool(
        streaming and (streaming.dash_manifest_url or streaming.hls_manifest_url)
    )
    return VideoClassification(
        is_live=bool(info.is_live),
        is_post_live_dvr=bool(info.is_post_live_dvr) or (bool(info.is_live_content) and has_manifest_url),
    )


def ensure_playable(metadata: VideoMetadata) -> None:
    """Raise ``PlayabilityError`` unless the platform reports status OK."""
    status = metadata.playability_status
    if status is None or status.status != "OK":
        reason = status.reason if status else None
        raise PlayabilityError(
            f"Cannot play video: {reason}",
            status=status.status if status else None,
            reason=reason,
        )


def _suffixed(dash_url: str) -> str:
    return f"{dash_url}{LIVE_MANIFEST_SUFFIX}"


class PlaybackResolver:
    """
    Resolves video metadata into a ``ManifestDescriptor``.

    Examples:
        >>> resolver = PlaybackResolver()
        >>> descriptor = await resolver.resolve(metadata)
        >>> await engine.load(descriptor.uri)
    """

    def __init__(self, manifest_options: ManifestOptions = SABR_MANIFEST_OPTIONS):
        self.manifest_options = manifest_options
        self.logger = get_context_logger("playback_resolver")
        self._branches: dict[
            DeliveryMode,
            Callable[[VideoMetadata, StreamingData], Awaitable[Optional[ManifestDescriptor]]],
        ] = {
            DeliveryMode.LIVE: self._resolve_live,
            DeliveryMode.POST_LIVE_DVR: self._resolve_post_live_dvr,
            DeliveryMode.VOD: self._resolve_vod,
        }

    async def resolve(
        self,
        metadata: VideoMetadata,
        classification: Optional[VideoClassification] = None,
    ) -> ManifestDescriptor:
        """
        Resolve the manifest to hand to the video engine.

        Args:
            metadata: Parsed video metadata
            classification: Precomputed classification (derived when omitted)

        Returns:
            ManifestDescriptor: Exactly one descriptor variant

        Raises:
            PlayabilityError: If the platform status is not OK
            ManifestResolutionError: If no manifest can be derived
        """
        ensure_playable(metadata)
        if classification is None:
            classification = classify(metadata)

        mode = classification.mode
        video_id = metadata.basic_info.id
        streaming = metadata.streaming_data

        descriptor = None
        if streaming is not None:
            descriptor = await self._branches[mode](metadata, streaming)

        if descriptor is None:
            raise ManifestResolutionError(
                "Could not find a valid manifest URI.", video_id=video_id, mode=mode.value
            )

        self.logger.info(
            PlayerEvents.MANIFEST_RESOLVED,
            video_id=video_id,
            mode=mode.value,
            variant=type(descriptor).__name__,
        )
        return descriptor

    async def _resolve_live(
        self, metadata: VideoMetadata, streaming: StreamingData
    ) -> Optional[ManifestDescriptor]:
        if streaming.dash_manifest_url:
            return DashManifestUrl(_suffixed(streaming.dash_manifest_url))
        if streaming.hls_manifest_url:
            return HlsManifestUrl(streaming.hls_manifest_url)
        return None

    async def _resolve_post_live_dvr(
        self, metadata: VideoMetadata, streaming: StreamingData
    ) -> Optional[ManifestDescriptor]:
        if streaming.hls_manifest_url:
            return HlsManifestUrl(streaming.hls_manifest_url)
        if streaming.dash_manifest_url:
            return DashManifestUrl(_suffixed(streaming.dash_manifest_url))
        return None

    async def _resolve_vod(
        self, metadata: VideoMetadata, streaming: StreamingData
    ) -> Optional[ManifestDescriptor]:
        manifest_xml = await metadata.to_dash(self.manifest_options.to_dict())
        if not manifest_xml:
            return None
        return InlineDashManifest.from_xml(manifest_xml)


__all__ = [
    "SABR_MANIFEST_OPTIONS",
    "classify",
    "ensure_playable",
    "PlaybackResolver",
]
