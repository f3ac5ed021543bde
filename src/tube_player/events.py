"""Tube player event type constants."""

from enum import Enum


class PlayerEvents(str, Enum):
    """Event type constants for structured logging."""

    # Initialization events
    INIT_ATTEMPT = "player.init.attempt"
    INIT_SUCCESS = "player.init.success"
    INIT_FAILED = "player.init.failed"

    # Load events
    LOAD_STARTED = "player.load.started"
    LOAD_COMPLETED = "player.load.completed"
    LOAD_FAILED = "player.load.failed"

    # Manifest events
    MANIFEST_RESOLVED = "player.manifest.resolved"

    # Token events
    TOKEN_COLD_START = "player.token.cold_start"
    TOKEN_MINTED = "player.token.minted"
    TOKEN_FAILED = "player.token.failed"

    # Streaming adapter events
    ADAPTER_ATTACHED = "player.adapter.attached"
    ADAPTER_DISPOSED = "player.adapter.disposed"
    RELOAD_REQUESTED = "player.reload.requested"
    RELOAD_APPLIED = "player.reload.applied"

    # Transport events
    PROXY_REQUEST = "player.proxy.request"
    PROXY_HTML_ERROR = "player.proxy.html_error"


__all__ = ["PlayerEvents"]
