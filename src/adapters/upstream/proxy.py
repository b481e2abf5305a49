"""
Upstream proxy adapter - forwards requests to the protected site.

The protected site is opaque: method, path, query, headers and body are
passed through as received, and the upstream response is returned as-is
apart from hop-by-hop headers.
"""

import logging

import httpx

from src.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Connection-level headers that must not be forwarded (RFC 9110 section 7.6.1)
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# Recomputed by httpx / the ASGI server for the new message
_RECOMPUTED_HEADERS = frozenset({"host", "content-length", "content-encoding"})


def forwardable(headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    skip = HOP_BY_HOP_HEADERS | _RECOMPUTED_HEADERS
    return [(name, value) for name, value in headers if name.lower() not in skip]


class UpstreamProxy:
    """Sends one request upstream per inbound request, no retries."""

    def __init__(self, http: httpx.AsyncClient, upstream_url: str) -> None:
        self._http = http
        self._upstream_url = upstream_url.rstrip("/")

    async def forward(
        self,
        method: str,
        path: str,
        query: str,
        headers: list[tuple[str, str]],
        body: bytes,
    ) -> httpx.Response:
        """
        Forward a request and return the buffered upstream response.

        Raises:
            ConfigurationError: If no upstream URL is configured
            httpx.HTTPError: If the upstream cannot be reached
        """
        if not self._upstream_url:
            raise ConfigurationError("UPSTREAM_URL")

        url = f"{self._upstream_url}{path}"
        if query:
            url = f"{url}?{query}"

        response = await self._http.request(
            method,
            url,
            headers=forwardable(headers),
            content=body,
        )
        logger.debug("Proxied %s %s -> %s", method, path, response.status_code)
        return response
