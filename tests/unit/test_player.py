"""Unit tests for the TubePlayer orchestrator."""

import pytest

from tube_player.exceptions import InitializationError, PlayabilityError
from tube_player.player import DEFAULT_OVERLAY_CONFIG, TubePlayer
from tube_player.playback_session import PlaybackStatus
from tube_player.types import PlayabilityStatus

from conftest import (
    FakeClientFactory,
    FakeOverlay,
    FakePlatformClient,
    FakeSurface,
    make_vod_info,
)


@pytest.fixture
def player(settings, http_clients, platform_client, video_engine, adapter_factory, minting_engine):
    return TubePlayer(
        video_engine,
        FakeClientFactory(platform_client),
        adapter_factory,
        minting_engine,
        settings=settings,
        http_clients=http_clients,
        overlay=FakeOverlay(),
        surface=FakeSurface(),
    )


class TestTubePlayerInitialization:
    """Test player start-up."""

    @pytest.mark.asyncio
    async def test_initialize_sets_up_collaborators(self, player, video_engine, minting_engine, platform_client):
        await player.initialize()

        assert player.client is platform_client
        assert minting_engine.init_calls == 1
        assert video_engine.attached
        assert video_engine.config["abr"] == {"enabled": True}
        assert video_engine.config["streaming"]["bufferingGoal"] == 120
        assert player.overlay.config == DEFAULT_OVERLAY_CONFIG

    @pytest.mark.asyncio
    async def test_player_settings_override_engine_config(self, player, video_engine):
        player.settings.player = {"streaming": {"bufferingGoal": 30}}

        await player.initialize()

        assert video_engine.config["streaming"] == {"bufferingGoal": 30, "rebufferingGoal": 2}

    @pytest.mark.asyncio
    async def test_initialize_failure_propagates(
        self, settings, http_clients, video_engine, adapter_factory, minting_engine
    ):
        factory = FakeClientFactory(FakePlatformClient(), failures=5)
        player = TubePlayer(
            video_engine, factory, adapter_factory, minting_engine,
            settings=settings, http_clients=http_clients,
        )

        with pytest.raises(InitializationError):
            await player.initialize(max_retries=2)

        assert len(factory.calls) == 2
        assert not video_engine.attached

    @pytest.mark.asyncio
    async def test_explicit_zero_retries_rejected(self, player, video_engine):
        with pytest.raises(ValueError):
            await player.initialize(max_retries=0)

        assert player.client is None
        assert not video_engine.attached


class TestTubePlayerLoad:
    """Test load_video preconditions and failure handling."""

    @pytest.mark.asyncio
    async def test_load_before_initialize_raises(self, player):
        with pytest.raises(InitializationError):
            await player.load_video("abc")

    @pytest.mark.asyncio
    async def test_empty_video_id_rejected(self, player):
        await player.initialize()

        with pytest.raises(ValueError, match="Please enter a video ID."):
            await player.load_video("")

    @pytest.mark.asyncio
    async def test_load_returns_basic_info(self, player, platform_client, video_engine):
        await player.initialize()

        info = await player.load_video("vod123")

        assert info.title == "A video"
        assert player.session.status is PlaybackStatus.PLAYING
        assert player.session.classification.is_live is False
        assert video_engine.loaded[0].startswith("data:application/dash+xml;base64,")
        assert platform_client.requests[0][1]["videoId"] == "vod123"
        assert platform_client.parsed_cpns == [player.session.cpn]

    @pytest.mark.asyncio
    async def test_unplayable_video_marks_session_failed(self, player, platform_client, adapter_factory):
        platform_client.responses = [
            make_vod_info(playability_status=PlayabilityStatus(status="UNPLAYABLE", reason="Video unavailable"))
        ]
        await player.initialize()

        with pytest.raises(PlayabilityError):
            await player.load_video("gone")

        assert player.session.status is PlaybackStatus.ERROR
        assert player.session.error_message == "Cannot play video: Video unavailable (status=UNPLAYABLE)"
        assert adapter_factory.created == []

    @pytest.mark.asyncio
    async def test_destroy_tears_everything_down(self, player, video_engine, minting_engine, http_clients, adapter_factory):
        await player.initialize()
        await player.load_video("vod123")

        await player.destroy()

        assert video_engine.destroyed
        assert adapter_factory.created[0].disposed
        assert minting_engine.disposed
        assert player.overlay.destroyed
        assert player.surface.removed
        assert player.client is None
        assert http_clients.open_clients == 0
        assert player.session.status is PlaybackStatus.CLOSED

    @pytest.mark.asyncio
    async def test_context_manager(self, player, video_engine):
        async with player as active:
            assert active.client is not None

        assert video_engine.destroyed
