"""
Session Initializer

Constructs the platform API client with a bounded retry loop. The first
attempt runs with response caching enabled; every retry disables it, since
stale cached player or session data is the usual cause of a failed first
construction. Player script requests carry a cache-busting stamp on every
attempt (see ``CacheBustingTransport``).
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from .cache import SessionCache
from .events import PlayerEvents
from .exceptions import InitializationError
from .http_client_manager import HttpClientManager
from .interfaces import PlatformClient, PlatformClientFactory
from .log_config import get_context_logger
from .transport import CacheBuster


DEFAULT_MAX_RETRIES = 3


@dataclass
class ClientHandle:
    """A fully constructed platform client and the HTTP client it owns."""

    client: PlatformClient
    http_client: httpx.AsyncClient
    attempts: int


class SessionInitializer:
    """
    Builds the platform client handle with retries.

    The first handle to be established wins: a handle finishing later (from
    a concurrent ``initialize()`` call) is discarded and the established one
    is returned instead.

    Examples:
        >>> initializer = SessionInitializer(create_client, HttpClientManager())
        >>> handle = await initializer.initialize(max_retries=3)
        >>> raw = await handle.client.execute("/player", payload)
    """

    def __init__(
        self,
        client_factory: PlatformClientFactory,
        http_clients: HttpClientManager,
        cache_buster: Optional[CacheBuster] = None,
    ):
        self.client_factory = client_factory
        self.http_clients = http_clients
        self.cache_buster = cache_buster or CacheBuster()
        self.handle: Optional[ClientHandle] = None
        self.logger = get_context_logger("session_initializer")

    async def initialize(
        self, max_retries: int = DEFAULT_MAX_RETRIES, use_proxy: bool = True
    ) -> ClientHandle:
        """
        Construct the platform client, retrying up to ``max_retries`` times.

        Args:
            max_retries: Maximum number of construction attempts
            use_proxy: Route client traffic through the forwarding proxy

        Returns:
            ClientHandle: The established handle

        Raises:
            InitializationError: When every attempt failed; chained to the last error
                (callers matching on the underlying exception type must inspect
                ``error.last_error``)
            ValueError: If max_retries is less than 1
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")

        attempt = 0
        while True:
            cache = SessionCache(enabled=attempt == 0)
            http_client = self.http_clients.create_client(
                use_proxy=use_proxy, cache_buster=self.cache_buster
            )
            self.logger.debug(
                PlayerEvents.INIT_ATTEMPT,
                attempt=attempt + 1,
                max_retries=max_retries,
                cache_enabled=cache.enabled,
            )
            try:
                client = await self.client_factory(cache=cache, http_client=http_client)
            except Exception as e:
                await self.http_clients.release(http_client)
                attempt += 1
                self.logger.error(
                    PlayerEvents.INIT_FAILED,
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if attempt >= max_retries:
                    raise InitializationError(
                        f"Platform client initialization failed: {e}",
                        attempts=attempt,
                        last_error=e,
                    ) from e
                self.logger.info("Retrying platform client initialization", attempt=attempt + 1)
                continue

            return await self._establish(ClientHandle(client, http_client, attempt + 1))

    async def _establish(self, handle: ClientHandle) -> ClientHandle:
        if self.handle is not None:
            self.logger.warning(
                "Discarding late platform client, a handle is already established",
                attempts=handle.attempts,
            )
            await self.http_clients.release(handle.http_client)
            return self.handle

        self.handle = handle
        self.logger.info(PlayerEvents.INIT_SUCCESS, attempts=handle.attempts)
        return handle

    async def close(self) -> None:
        """Release the established handle."""
        if self.handle is not None:
            await self.http_clients.release(self.handle.http_client)
            self.handle = None


__all__ = ["ClientHandle", "SessionInitializer", "DEFAULT_MAX_RETRIES"]
