"""
Playback Session Domain Object

Mutable orchestration state for one loaded video. A new session replaces the
previous one on every load; nothing is carried over.
"""

import secrets
import string
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .interfaces import StreamingAdapter
from .log_config import get_context_logger
from .token_minter import TokenRecord
from .types import VideoClassification


CPN_ALPHABET = string.ascii_letters + string.digits + "-_"


def generate_cpn(length: int = 16) -> str:
    """Generate a client playback nonce."""
    return "".join(secrets.choice(CPN_ALPHABET) for _ in range(length))


class PlaybackStatus(str, Enum):
    """Playback session status enumeration."""
    PENDING = "pending"
    LOADING = "loading"
    PLAYING = "playing"
    ERROR = "error"
    CLOSED = "closed"


@dataclass
class PlaybackSession:
    """
    Domain object representing one player load.

    Attributes:
        session_id: Unique session identifier
        content_id: Content id being played
        cpn: Client playback nonce, shared by the initial and reload requests
        status: Current playback status
        classification: Delivery classification, set once resolved
        tokens: Token record of the minter for this content binding
        adapter: Active streaming adapter handle
        streaming_url: Last deciphered streaming URL applied to the adapter
        ustreamer_config: Last ustreamer config applied to the adapter
        reload_count: Number of reload handshakes served
        error_message: Caller-facing message of the failure, if any
    """

    content_id: str = ""
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    cpn: str = field(default_factory=generate_cpn)
    status: PlaybackStatus = PlaybackStatus.PENDING
    classification: VideoClassification | None = None
    tokens: TokenRecord = field(default_factory=TokenRecord)
    adapter: StreamingAdapter | None = field(default=None, repr=False)
    streaming_url: str | None = None
    ustreamer_config: str | None = None
    reload_count: int = 0
    error_message: str | None = None

    logger: Any = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Initialize logger after dataclass initialization."""
        if self.logger is None:
            self.logger = get_context_logger("playback_session")

    @property
    def is_playing(self) -> bool:
        return self.status == PlaybackStatus.PLAYING

    def start_loading(self) -> None:
        self.status = PlaybackStatus.LOADING

    def mark_playing(self) -> None:
        self.status = PlaybackStatus.PLAYING
        self.logger.info("Session playing", session_id=self.session_id, content_id=self.content_id)

    def mark_failed(self, error_message: str) -> None:
        """Move to the not-playing error state."""
        self.status = PlaybackStatus.ERROR
        self.error_message = error_message
        self.logger.error(
            "Session error",
            session_id=self.session_id,
            content_id=self.content_id,
            error=error_message,
        )

    def close(self) -> None:
        self.status = PlaybackStatus.CLOSED
        self.adapter = None

    def apply_streaming_url(self, url: str) -> None:
        self.streaming_url = url

    def apply_ustreamer_config(self, config: str | None) -> None:
        self.ustreamer_config = config

    def to_dict(self) -> dict[str, Any]:
        """Serialize session state (adapter handle excluded)."""
        return {
            'session_id': self.session_id,
            'content_id': self.content_id,
            'cpn': self.cpn,
            'status': self.status.value,
            'classification': (
                {
                    'is_live': self.classification.is_live,
                    'is_post_live_dvr': self.classification.is_post_live_dvr,
                }
                if self.classification
                else None
            ),
            'token_state': self.tokens.state.value,
            'streaming_url': self.streaming_url,
            'reload_count': self.reload_count,
            'error_message': self.error_message,
        }


__all__ = [
    "generate_cpn",
    "PlaybackStatus",
    "PlaybackSession",
]
