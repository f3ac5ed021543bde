"""
Streaming Bridge

Connects a resolved load to the SABR streaming adapter. The bridge is the
``PlaybackDataProvider`` injected into the adapter: the adapter calls
``mint_token()`` whenever it needs a proof-of-origin token and
``reload_playback_data()`` when its streaming URL has gone stale.
"""

import asyncio
from typing import Any, Optional

from .events import PlayerEvents
from .exceptions import ManifestResolutionError
from .interfaces import PlatformClient, StreamingAdapter, VideoEngine, VideoMetadata
from .log_config import get_context_logger
from .playback_session import PlaybackSession
from .token_minter import TokenMinter
from .types import DeliveryMode, VideoClassification


PLAYER_ENDPOINT = "/player"


def build_player_request(
    video_id: str,
    signature_timestamp: Optional[int],
    reload_context: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build the player info request payload.

    Args:
        video_id: Content id
        signature_timestamp: Signature timestamp of the loaded player script
        reload_context: Reload context handed back by the adapter, if any

    Returns:
        dict: Request payload for the ``/player`` endpoint
    """
    playback_context: dict[str, Any] = {
        "adPlaybackContext": {"pyv": True},
        "contentPlaybackContext": {"signatureTimestamp": signature_timestamp},
    }
    if reload_context is not None:
        playback_context["reloadPlaybackContext"] = reload_context

    return {
        "videoId": video_id,
        "contentCheckOk": True,
        "racyCheckOk": True,
        "playbackContext": playback_context,
    }


class StreamingBridge:
    """
    Wires one load's metadata into the streaming adapter.

    Token minting policy: for live streams the mint is awaited before a
    token is returned, because live playback needs it at session start; for
    everything else the mint runs in the background and the best token
    available right now is returned.

    Examples:
        >>> bridge = StreamingBridge(client, minter, engine, session)
        >>> adapter = adapter_factory(client_info, bridge)
        >>> bridge.attach(adapter, metadata, classification)
        >>> await bridge.prime(metadata)
    """

    def __init__(
        self,
        client: PlatformClient,
        minter: TokenMinter,
        engine: VideoEngine,
        session: PlaybackSession,
    ):
        self.client = client
        self.minter = minter
        self.engine = engine
        self.session = session
        self.adapter: Optional[StreamingAdapter] = None
        self.classification: Optional[VideoClassification] = None
        self._disposed = False
        self._mint_tasks: set[asyncio.Task] = set()
        self.logger = get_context_logger("streaming_bridge")

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def attach(
        self,
        adapter: StreamingAdapter,
        metadata: VideoMetadata,
        classification: VideoClassification,
    ) -> None:
        """Record the adapter for this load and attach it to the video engine."""
        self.adapter = adapter
        self.classification = classification
        self.session.adapter = adapter
        self.session.classification = classification
        adapter.attach(self.engine)
        self.logger.debug(
            PlayerEvents.ADAPTER_ATTACHED,
            video_id=metadata.basic_info.id,
            is_live=classification.is_live,
            is_post_live_dvr=classification.is_post_live_dvr,
        )

    async def prime(self, metadata: VideoMetadata) -> None:
        """
        Hand on-demand streaming data to the adapter before the engine loads.

        Live and post-live DVR streams skip this step; their streaming URL
        arrives through the reload handshake once the adapter asks for it.
        """
        streaming = metadata.streaming_data
        if self.adapter is None or self.classification is None or streaming is None:
            return
        if self.classification.mode is not DeliveryMode.VOD:
            return

        url = await self.client.decipher(streaming.server_abr_streaming_url)
        self._apply(url, metadata.ustreamer_config)
        self.adapter.set_server_abr_formats(streaming.adaptive_formats)

    async def mint_token(self) -> str:
        """Return the best available token, starting a mint if none was minted yet."""
        tokens = self.session.tokens
        if self._disposed:
            return tokens.best_token()

        if tokens.minted_token is None:
            binding = self.session.content_id
            if self.classification is not None and self.classification.is_live:
                await self.minter.mint_for_binding(binding)
            else:
                task = asyncio.create_task(self.minter.mint_for_binding(binding))
                self._mint_tasks.add(task)
                task.add_done_callback(self._mint_tasks.discard)

        return tokens.best_token()

    async def reload_playback_data(self, reload_context: dict[str, Any]) -> None:
        """
        Refetch player info with ``reload_context`` and apply the fresh streaming data.

        Raises:
            ManifestResolutionError: If the reloaded response has no streaming URL
        """
        if self.adapter is None or self._disposed:
            self.logger.warning("Reload requested on a detached bridge, ignoring")
            return

        video_id = self.session.content_id
        self.logger.info(PlayerEvents.RELOAD_REQUESTED, video_id=video_id)

        payload = build_player_request(
            video_id, self.client.signature_timestamp, reload_context
        )
        raw = await self.client.execute(PLAYER_ENDPOINT, payload)
        metadata = self.client.parse_video_info(raw, self.session.cpn)

        streaming = metadata.streaming_data
        if streaming is None or not streaming.server_abr_streaming_url:
            raise ManifestResolutionError(
                "Reloaded player response has no streaming URL", video_id=video_id
            )

        url = await self.client.decipher(streaming.server_abr_streaming_url)
        if self._disposed:
            self.logger.debug("Bridge disposed during reload, dropping result", video_id=video_id)
            return

        self._apply(url, metadata.ustreamer_config)
        self.session.reload_count += 1
        self.logger.info(
            PlayerEvents.RELOAD_APPLIED, video_id=video_id, reload_count=self.session.reload_count
        )

    def _apply(self, url: str, ustreamer_config: Optional[str]) -> None:
        self.adapter.set_streaming_url(url)
        self.session.apply_streaming_url(url)
        self.adapter.set_ustreamer_config(ustreamer_config)
        self.session.apply_ustreamer_config(ustreamer_config)

    def dispose(self) -> None:
        """Dispose the adapter; safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        if self.adapter is not None:
            self.adapter.dispose()
            self.logger.debug(PlayerEvents.ADAPTER_DISPOSED, video_id=self.session.content_id)


__all__ = ["PLAYER_ENDPOINT", "build_player_request", "StreamingBridge"]
