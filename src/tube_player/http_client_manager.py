"""HTTP client manager for platform client construction and lifecycle."""

from typing import Any, Optional

import httpx

from .settings import Settings, get_settings, resolve_session_id
from .transport import CacheBuster, CacheBustingTransport, ProxyTransport


def _load_http_config(settings: Settings) -> dict[str, Any]:
    """Load HTTP client configuration from ``settings.http``."""

    http_cfg = settings.http or {}

    def _get(key: str, default: Any) -> Any:
        return http_cfg.get(key, default)

    return {
        "timeout": _get("timeout", 30.0),
        "max_connections": _get("max_connections", 20),
        "max_keepalive_connections": _get("max_keepalive_connections", 10),
        "keepalive_expiry": _get("keepalive_expiry", 5.0),
        "verify": _get("verify_ssl", True),
    }


class HttpClientManager:
    """
    Builds and tracks the HTTP clients handed to the platform client.

    Each client gets the transport chain
    ``CacheBustingTransport -> [ProxyTransport ->] base transport``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client manager.

        Args:
            settings: Settings to read HTTP and proxy configuration from
            base_transport: Transport used for the network hop (defaults to
                a pooled ``httpx.AsyncHTTPTransport`` per client)
        """
        self.settings = settings or get_settings()
        self._base_transport = base_transport
        self._clients: list[httpx.AsyncClient] = []

    def _build_transport(
        self, use_proxy: bool, cache_buster: CacheBuster
    ) -> httpx.AsyncBaseTransport:
        cfg = _load_http_config(self.settings)
        transport = self._base_transport or httpx.AsyncHTTPTransport(
            verify=cfg["verify"],
            limits=httpx.Limits(
                max_keepalive_connections=cfg["max_keepalive_connections"],
                max_connections=cfg["max_connections"],
                keepalive_expiry=cfg["keepalive_expiry"],
            ),
        )
        if use_proxy:
            transport = ProxyTransport(
                transport,
                proxy_origin=self.settings.proxy_origin,
                session_id_provider=lambda: resolve_session_id(self.settings),
                bypass=self.settings.skip_proxy,
            )
        return CacheBustingTransport(transport, cache_buster)

    def create_client(
        self, *, use_proxy: bool = True, cache_buster: Optional[CacheBuster] = None
    ) -> httpx.AsyncClient:
        """
        Create a tracked HTTP client for one platform client construction.

        Args:
            use_proxy: Route requests through the forwarding proxy
            cache_buster: Shared stamp source, so stamps keep increasing across attempts

        Returns:
            httpx.AsyncClient: New client
        """
        cfg = _load_http_config(self.settings)
        client = httpx.AsyncClient(
            transport=self._build_transport(use_proxy, cache_buster or CacheBuster()),
            timeout=cfg["timeout"],
            follow_redirects=True,
        )
        self._clients.append(client)
        return client

    async def release(self, client: httpx.AsyncClient) -> None:
        """Close a client and stop tracking it."""
        if client in self._clients:
            self._clients.remove(client)
        await client.aclose()

    async def close(self):
        """Close all HTTP clients."""
        clients, self._clients = self._clients, []
        for client in clients:
            await client.aclose()

    @property
    def open_clients(self) -> int:
        return len(self._clients)


__all__ = ["HttpClientManager"]
