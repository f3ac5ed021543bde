"""Logging configuration package."""

from .main import (
    PlaybackLogContext,
    clear_playback_context,
    configure_logging,
    get_context_logger,
)


__all__ = [
    "get_context_logger",
    "configure_logging",
    "PlaybackLogContext",
    "clear_playback_context",
]
