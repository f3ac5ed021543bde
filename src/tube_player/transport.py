"""
Proxy Transport

httpx transports used by the platform client:

- ``ProxyTransport`` rewrites requests onto the forwarding proxy, carrying the
  original host, headers and proxy session in the query string, and turns
  HTML error pages from the proxy into ``ProxyTransportError``.
- ``CacheBustingTransport`` stamps player script requests with a
  monotonically increasing ``t`` parameter so a forwarding cache cannot hand
  back a stale script.

Proxy URL shape:
    https://<proxy-host>/<path>?<query>&__host=<host>&__headers=<json>&session=<id>
"""

import json
import time
from typing import Callable, Optional

import httpx

from .events import PlayerEvents
from .exceptions import ProxyTransportError
from .log_config import get_context_logger


# Field projection applied to player info requests to keep responses small.
PLAYER_FIELDS = ",".join(
    [
        "playerConfig",
        "storyboards",
        "captions",
        "playabilityStatus",
        "streamingData",
        "responseContext.mainAppWebResponseContext.datasyncId",
        "videoDetails.isLive",
        "videoDetails.isLiveContent",
        "videoDetails.title",
        "videoDetails.author",
        "videoDetails.thumbnail",
    ]
)
PLAYER_ENDPOINT_MARKER = "v1/player"
PLAYER_SCRIPT_MARKERS = ("player", "base.js")


def headers_to_dict(headers: httpx.Headers) -> dict[str, str]:
    """Flatten headers into a plain dict with trimmed names."""
    return {key.strip(): value for key, value in headers.items()}


def build_proxy_url(
    url: httpx.URL,
    headers: dict[str, str],
    proxy_origin: str,
    session_id: Optional[str] = None,
) -> httpx.URL:
    """
    Map a target URL onto the proxy origin.

    Args:
        url: Original request URL
        headers: Original request headers, serialized into ``__headers``
        proxy_origin: Base URL of the forwarding proxy
        session_id: Proxy session identifier, omitted when None

    Returns:
        httpx.URL: URL to send to the proxy

    Examples:
        >>> proxied = build_proxy_url(
        ...     httpx.URL("https://www.youtube.com/s/player/base.js?x=1"),
        ...     {"accept": "*/*"},
        ...     "https://proxy.example.com/",
        ... )
        >>> proxied.host, proxied.params["__host"]
        ('proxy.example.com', 'www.youtube.com')
    """
    proxied = httpx.URL(proxy_origin).join(url.raw_path.decode("ascii"))
    proxied = proxied.copy_add_param("__host", url.netloc.decode("ascii"))
    proxied = proxied.copy_add_param("__headers", json.dumps(headers))
    if session_id:
        proxied = proxied.copy_add_param("session", session_id)
    return proxied


def is_player_script_url(url: str) -> bool:
    return any(marker in url for marker in PLAYER_SCRIPT_MARKERS)


class ProxyTransport(httpx.AsyncBaseTransport):
    """
    Transport forwarding every request through the proxy.

    Attributes:
        proxy_origin: Base URL of the forwarding proxy
        bypass: Send requests straight to their target (field projection still applies)

    Examples:
        >>> transport = ProxyTransport(
        ...     httpx.AsyncHTTPTransport(),
        ...     proxy_origin="https://proxy.example.com/",
        ...     session_id_provider=lambda: "abc",
        ... )
        >>> async with httpx.AsyncClient(transport=transport) as client:
        ...     response = await client.get("https://www.youtube.com/youtubei/v1/player")
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        proxy_origin: str,
        session_id_provider: Callable[[], Optional[str]] | None = None,
        bypass: bool = False,
    ):
        self._inner = inner
        self.proxy_origin = proxy_origin
        self.bypass = bypass
        self._session_id_provider = session_id_provider or (lambda: None)
        self.logger = get_context_logger("proxy_transport")

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        url = request.url
        if PLAYER_ENDPOINT_MARKER in url.path:
            url = url.copy_set_param("$fields", PLAYER_FIELDS)

        # The proxy request gets its own Host header; the original one is
        # conveyed through __host instead.
        headers = httpx.Headers(
            [(k, v) for k, v in request.headers.multi_items() if k.lower() != "host"]
        )
        content = await request.aread()

        if self.bypass:
            target = url
        else:
            target = build_proxy_url(
                url, headers_to_dict(headers), self.proxy_origin, self._session_id_provider()
            )

        self.logger.debug(
            PlayerEvents.PROXY_REQUEST,
            method=request.method,
            host=url.host,
            path=url.path,
            bypass=self.bypass,
        )

        proxied = httpx.Request(
            request.method,
            target,
            headers=headers,
            content=content,
            extensions=request.extensions,
        )
        response = await self._inner.handle_async_request(proxied)

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type and response.status_code >= 400:
            await response.aread()
            preview = response.text[:100]
            self.logger.warning(
                PlayerEvents.PROXY_HTML_ERROR,
                status_code=response.status_code,
                body_preview=preview,
            )
            raise ProxyTransportError(
                f"Proxy returned HTML error: {response.status_code} "
                f"{response.reason_phrase} - {preview}",
                status_code=response.status_code,
                body_preview=preview,
            )

        return response

    async def aclose(self) -> None:
        await self._inner.aclose()


class CacheBuster:
    """Source of strictly increasing millisecond stamps."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def next_stamp(self) -> int:
        stamp = max(int(self._clock() * 1000), self._last + 1)
        self._last = stamp
        return stamp


class CacheBustingTransport(httpx.AsyncBaseTransport):
    """Transport appending a fresh ``t`` parameter to player script requests."""

    def __init__(self, inner: httpx.AsyncBaseTransport, cache_buster: CacheBuster | None = None):
        self._inner = inner
        self.cache_buster = cache_buster or CacheBuster()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if is_player_script_url(str(request.url)):
            url = request.url.copy_set_param("t", str(self.cache_buster.next_stamp()))
            request = httpx.Request(
                request.method,
                url,
                headers=request.headers,
                content=await request.aread(),
                extensions=request.extensions,
            )
        return await self._inner.handle_async_request(request)

    async def aclose(self) -> None:
        await self._inner.aclose()


__all__ = [
    "PLAYER_FIELDS",
    "headers_to_dict",
    "build_proxy_url",
    "is_player_script_url",
    "ProxyTransport",
    "CacheBuster",
    "CacheBustingTransport",
]
