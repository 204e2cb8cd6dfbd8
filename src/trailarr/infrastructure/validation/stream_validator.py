"""HTTP stream reachability probe (HEAD, ranged GET fallback)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from httpx import HTTPError, InvalidURL, TimeoutException

if TYPE_CHECKING:
    from httpx import AsyncClient

log = structlog.get_logger(__name__)

# Servers that reject the HEAD method itself; anything else is a verdict.
_HEAD_UNSUPPORTED = frozenset({405, 501})


class HttpStreamValidator:
    """Validates candidate media URLs before they reach the caller.

    Signed CDN URLs expire or get blocked per client (403), so each
    selected URL is probed once.  No results are cached: a URL that was
    alive a minute ago may already be dead.

    Args:
        http_client: Shared httpx.AsyncClient (injected).
        timeout_seconds: Max time per probe (default: 10s).
    """

    def __init__(self, http_client: AsyncClient, timeout_seconds: float = 10.0) -> None:
        self.http_client = http_client
        self.timeout = timeout_seconds

    async def probe(self, url: str) -> bool:
        """Return True if *url* answers 2xx (HEAD, or ranged GET when HEAD is refused)."""
        try:
            response = await self.http_client.head(
                url,
                timeout=self.timeout,
                follow_redirects=True,
            )
        except TimeoutException:
            log.warning("stream_probe_timeout", url=url[:120], timeout=self.timeout)
            return False
        except (HTTPError, InvalidURL) as e:
            log.warning("stream_probe_http_error", url=url[:120], error=str(e))
            return False

        if response.status_code in _HEAD_UNSUPPORTED:
            return await self._probe_ranged_get(url)

        if 200 <= response.status_code < 300:
            log.debug("stream_probe_ok", url=url[:120], status=response.status_code)
            return True

        log.warning("stream_probe_failed", url=url[:120], status=response.status_code)
        return False

    async def _probe_ranged_get(self, url: str) -> bool:
        """GET the first byte only; the body is never read."""
        try:
            async with self.http_client.stream(
                "GET",
                url,
                headers={"Range": "bytes=0-0"},
                timeout=self.timeout,
                follow_redirects=True,
            ) as response:
                is_valid = 200 <= response.status_code < 300
        except TimeoutException:
            log.warning("stream_probe_get_timeout", url=url[:120], timeout=self.timeout)
            return False
        except (HTTPError, InvalidURL) as e:
            log.warning("stream_probe_get_http_error", url=url[:120], error=str(e))
            return False

        log.debug(
            "stream_probe_get_fallback_result",
            url=url[:120],
            status=response.status_code,
            valid=is_valid,
        )
        return is_valid
