"""Tube player orchestrator: the public entry point for host applications."""

import asyncio
from typing import Any, Optional

from .bridge import PLAYER_ENDPOINT, StreamingBridge, build_player_request
from .events import PlayerEvents
from .exceptions import InitializationError
from .http_client_manager import HttpClientManager
from .initializer import SessionInitializer
from .interfaces import (
    MintingEngine,
    Overlay,
    PlatformClient,
    PlatformClientFactory,
    StreamingAdapterFactory,
    VideoEngine,
    VideoSurface,
)
from .log_config import PlaybackLogContext, get_context_logger
from .playback_session import PlaybackSession
from .resolver import PlaybackResolver, classify, ensure_playable
from .settings import Settings, get_settings
from .token_minter import TokenMinter
from .types import BasicInfo, ClientInfo


DEFAULT_ENGINE_CONFIG: dict[str, Any] = {
    "abr": {"enabled": True},
    "streaming": {"bufferingGoal": 120, "rebufferingGoal": 2},
}

DEFAULT_OVERLAY_CONFIG: dict[str, Any] = {
    "addBigPlayButton": False,
    "overflowMenuButtons": [
        "captions",
        "quality",
        "language",
        "chapter",
        "picture_in_picture",
        "playback_rate",
        "loop",
        "recenter_vr",
        "toggle_stereoscopic",
        "save_video_frame",
    ],
    "customContextMenu": True,
}


class TubePlayer:
    """
    Facade turning a content id into a playing adaptive-streaming session.

    Collaborators are injected: the platform client factory, the streaming
    adapter factory, the token minting engine and the video engine. The
    player owns one ``PlaybackSession`` at a time and replaces it on every
    load.

    Usage:
        >>> player = TubePlayer(engine, create_client, create_adapter, minting_engine)
        >>> await player.initialize()
        >>> info = await player.load_video("dQw4w9WgXcQ")
        >>> await player.destroy()

        Or as an async context manager:
        >>> async with TubePlayer(engine, create_client, create_adapter, minting_engine) as player:
        ...     await player.load_video("dQw4w9WgXcQ")
    """

    def __init__(
        self,
        engine: VideoEngine,
        client_factory: PlatformClientFactory,
        adapter_factory: StreamingAdapterFactory,
        minting_engine: MintingEngine,
        *,
        settings: Optional[Settings] = None,
        http_clients: Optional[HttpClientManager] = None,
        resolver: Optional[PlaybackResolver] = None,
        overlay: Optional[Overlay] = None,
        surface: Optional[VideoSurface] = None,
    ):
        self.settings = settings or get_settings()
        self.engine = engine
        self.adapter_factory = adapter_factory
        self.overlay = overlay
        self.surface = surface

        self.http_clients = http_clients or HttpClientManager(self.settings)
        self.initializer = SessionInitializer(client_factory, self.http_clients)
        self.minter = TokenMinter(minting_engine)
        self.resolver = resolver or PlaybackResolver()

        self.session: Optional[PlaybackSession] = None
        self._bridge: Optional[StreamingBridge] = None
        self._load_lock = asyncio.Lock()

        self.logger = get_context_logger("tube_player")

    @property
    def client(self) -> Optional[PlatformClient]:
        handle = self.initializer.handle
        return handle.client if handle else None

    @property
    def bridge(self) -> Optional[StreamingBridge]:
        return self._bridge

    def _engine_config(self) -> dict[str, Any]:
        return Settings._deep_merge(DEFAULT_ENGINE_CONFIG, self.settings.player or {})

    async def initialize(
        self, use_proxy: Optional[bool] = None, max_retries: Optional[int] = None
    ) -> None:
        """
        Construct the platform client, start the token engine and attach the video engine.

        Args:
            use_proxy: Route platform traffic through the forwarding proxy (default True)
            max_retries: Client construction attempts (default ``settings.max_retries``)

        Raises:
            InitializationError: If the platform client could not be constructed
        """
        await self.initializer.initialize(
            max_retries=self.settings.max_retries if max_retries is None else max_retries,
            use_proxy=True if use_proxy is None else use_proxy,
        )
        await self.minter.init()

        self.engine.configure(self._engine_config())
        await self.engine.attach()

        if self.overlay is not None:
            self.overlay.configure(DEFAULT_OVERLAY_CONFIG)

        self.logger.info("TubePlayer initialized")

    async def load_video(self, video_id: str) -> BasicInfo:
        """
        Load and start playing a video.

        Loads are serialized: the previous video is unloaded and its adapter
        disposed before the new one is fetched.

        Args:
            video_id: Content id to play

        Returns:
            BasicInfo: Basic details of the loaded video

        Raises:
            InitializationError: If ``initialize()`` has not completed
            ValueError: If video_id is empty
            PlayabilityError: If the platform refuses playback
            ManifestResolutionError: If no manifest could be resolved
            ProxyTransportError: If the proxy reported a failure
        """
        client = self.client
        if client is None:
            raise InitializationError("TubePlayer not initialized. Call initialize() first.")

        if not video_id:
            raise ValueError("Please enter a video ID.")

        async with self._load_lock:
            self.minter.invalidate()
            session = PlaybackSession(content_id=video_id, tokens=self.minter.bind(video_id))
            self.session = session

            with PlaybackLogContext(video_id=video_id, cpn=session.cpn):
                try:
                    return await self._load(client, session)
                except Exception as e:
                    session.mark_failed(str(e))
                    self.logger.error(
                        PlayerEvents.LOAD_FAILED, error=str(e), error_type=type(e).__name__
                    )
                    raise

    async def _load(self, client: PlatformClient, session: PlaybackSession) -> BasicInfo:
        session.start_loading()
        self.logger.info(PlayerEvents.LOAD_STARTED)

        await self.engine.unload()
        self._dispose_bridge()

        raw = await client.execute(
            PLAYER_ENDPOINT,
            build_player_request(session.content_id, client.signature_timestamp),
        )
        metadata = client.parse_video_info(raw, session.cpn)
        ensure_playable(metadata)

        classification = classify(metadata)
        descriptor = await self.resolver.resolve(metadata, classification)

        bridge = StreamingBridge(client, self.minter, self.engine, session)
        adapter = self.adapter_factory(ClientInfo.from_context(client.context), bridge)
        self._bridge = bridge
        bridge.attach(adapter, metadata, classification)
        await bridge.prime(metadata)

        await self.engine.load(descriptor.uri)
        session.mark_playing()

        self.logger.info(
            PlayerEvents.LOAD_COMPLETED,
            mode=classification.mode.value,
            title=metadata.basic_info.title,
        )
        return metadata.basic_info

    def _dispose_bridge(self) -> None:
        if self._bridge is not None:
            self._bridge.dispose()
            self._bridge = None

    async def destroy(self) -> None:
        """Tear down the adapter, token engine, overlay, video surface and HTTP clients."""
        await self.engine.destroy()
        self._dispose_bridge()
        self.minter.dispose()
        if self.overlay is not None:
            self.overlay.destroy()
        if self.surface is not None:
            self.surface.remove()
        await self.initializer.close()
        await self.http_clients.close()
        if self.session is not None:
            self.session.close()

        self.logger.info("TubePlayer destroyed")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.destroy()


__all__ = ["TubePlayer", "DEFAULT_ENGINE_CONFIG", "DEFAULT_OVERLAY_CONFIG"]
