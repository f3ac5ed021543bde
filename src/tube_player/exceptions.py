"""Tube player custom exception hierarchy.

Provides specific exception types for the failure modes of a playback load,
so callers can tell a transport fault from a resolution fault and surface a
readable status message.

Exception Hierarchy:
    TubePlayerError (base)
    ├── InitializationError
    ├── PlaybackError
    │   ├── PlayabilityError
    │   └── ManifestResolutionError
    ├── ProxyTransportError
    └── TokenMintingError
"""

from typing import Optional


class TubePlayerError(Exception):
    """Base exception for all tube player errors.

    All player-specific exceptions inherit from this class to allow
    catching every orchestration error with a single except clause.
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        """Initialize tube player exception.

        Args:
            message: Error message
            context: Optional context dictionary for debugging
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.context:
            context_str = "; ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class InitializationError(TubePlayerError):
    """Raised when the platform client could not be constructed.

    Attributes:
        attempts: Number of construction attempts made
        last_error: The error raised by the final attempt, unchanged
    """

    def __init__(
        self,
        message: str,
        attempts: Optional[int] = None,
        last_error: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if attempts is not None:
            context["attempts"] = attempts
        super().__init__(message, context)
        self.attempts = attempts
        self.last_error = last_error


# Playback Errors

class PlaybackError(TubePlayerError):
    """Base exception for errors that reject a load before playback starts."""

    pass


class PlayabilityError(PlaybackError):
    """Raised when the platform reports a non-OK status for the content.

    Attributes:
        status: Playability status reported by the platform
        reason: Human readable reason reported by the platform
    """

    def __init__(
        self,
        message: str,
        status: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if status:
            context["status"] = status
        super().__init__(message, context)
        self.status = status
        self.reason = reason


class ManifestResolutionError(PlaybackError):
    """Raised when no manifest variant can be derived from the metadata.

    Attributes:
        video_id: Content id the resolution was attempted for
        mode: Delivery mode the resolver was in
    """

    def __init__(
        self,
        message: str,
        video_id: Optional[str] = None,
        mode: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if video_id:
            context["video_id"] = video_id
        if mode:
            context["mode"] = mode
        super().__init__(message, context)
        self.video_id = video_id
        self.mode = mode


# Transport Errors

class ProxyTransportError(TubePlayerError):
    """Raised when the forwarding proxy answers with an HTML error page.

    The proxy reports its own failures as HTML bodies; this error surfaces
    them as a transport fault instead of letting JSON or script parsing
    fail on the page further downstream.

    Attributes:
        status_code: HTTP status returned by the proxy
        body_preview: First 100 characters of the HTML body
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body_preview: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if status_code:
            context["status_code"] = status_code
        super().__init__(message, context)
        self.status_code = status_code
        self.body_preview = body_preview


# Token Errors

class TokenMintingError(TubePlayerError):
    """Raised inside the token minter when the minting engine fails.

    Never escapes the minter: it is logged and playback proceeds with the
    best token available.

    Attributes:
        binding: Content binding the mint was attempted for
        engine_error: The underlying engine exception
    """

    def __init__(
        self,
        message: str,
        binding: Optional[str] = None,
        engine_error: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if binding:
            context["binding"] = binding
        super().__init__(message, context)
        self.binding = binding
        self.engine_error = engine_error


__all__ = [
    "TubePlayerError",
    "InitializationError",
    "PlaybackError",
    "PlayabilityError",
    "ManifestResolutionError",
    "ProxyTransportError",
    "TokenMintingError",
]
