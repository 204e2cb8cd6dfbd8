"""Public watch page strategy (HTML scraping fallback).

One GET per attempt; two in-memory techniques on the fetched HTML, in order:
1. Direct ``"hlsManifestUrl"`` regex match (cheapest, most common)
2. ``ytInitialPlayerResponse`` embedded JSON, decoded from the first ``{``
   after the marker up to its balanced closing brace
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from trailarr.domain.entities.streams import FailureSignal, StreamingManifest
from trailarr.domain.exceptions import StrategyFailure
from trailarr.infrastructure.youtube.constants import (
    BROWSER_USER_AGENT,
    CONSENT_COOKIE,
    WATCH_URL,
)
from trailarr.infrastructure.youtube.manifest_parser import parse_player_response

log = structlog.get_logger(__name__)

_HLS_URL_RE = re.compile(
    r'"hlsManifestUrl"\s*:\s*"(https:(?:\\/|/){2}manifest\.googlevideo\.com[^"]+)"'
)

PLAYER_RESPONSE_MARKER = "ytInitialPlayerResponse"

_decoder = json.JSONDecoder()


def _unescape_js(value: str) -> str:
    """Undo the JS string escapes YouTube applies to URLs."""
    return value.replace("\\u0026", "&").replace("\\/", "/")


def extract_hls_url(html: str) -> str | None:
    """Return the HLS manifest URL if it appears literally in the page."""
    match = _HLS_URL_RE.search(html)
    if not match:
        return None
    return _unescape_js(match.group(1))


def extract_json_object(text: str, marker: str) -> dict[str, Any] | None:
    """Decode the JSON object that follows *marker* in *text*.

    Starts at the first ``{`` after each marker occurrence and lets the JSON
    decoder find the balanced end, so ``};`` or ``</script>`` inside string
    values cannot truncate the payload.  Later occurrences are tried when an
    earlier one does not decode to an object.
    """
    search_from = 0
    while True:
        idx = text.find(marker, search_from)
        if idx < 0:
            return None
        search_from = idx + len(marker)
        start = text.find("{", search_from)
        if start < 0:
            return None
        try:
            obj, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            log.debug("watch_page_json_blob_undecodable", offset=start)
            continue
        if isinstance(obj, dict):
            return obj


class WatchPageStrategy:
    """Scrapes ``/watch?v=`` for an HLS URL or the embedded player response."""

    def __init__(self, http_client: httpx.AsyncClient, *, timeout: float = 15.0) -> None:
        self._http = http_client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "watch_page"

    async def _fetch_html(self, video_id: str) -> str:
        try:
            resp = await self._http.get(
                WATCH_URL,
                params={"v": video_id},
                headers={
                    "User-Agent": BROWSER_USER_AGENT,
                    "Accept-Language": "en-US,en;q=0.9",
                    "Cookie": CONSENT_COOKIE,
                },
                follow_redirects=True,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            log.warning("watch_page_timeout", video_id=video_id)
            raise StrategyFailure(
                self.name, FailureSignal.TRANSPORT, "request timed out"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("watch_page_request_failed", video_id=video_id, error=str(exc))
            raise StrategyFailure(self.name, FailureSignal.TRANSPORT, str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            log.warning("watch_page_http_error", video_id=video_id, status=resp.status_code)
            raise StrategyFailure(
                self.name,
                FailureSignal.TRANSPORT,
                f"HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.text

    async def attempt_resolve(self, video_id: str) -> StreamingManifest:
        html = await self._fetch_html(video_id)

        hls_url = extract_hls_url(html)
        if hls_url:
            log.debug("watch_page_hls_found", video_id=video_id)
            return StreamingManifest(source=self.name, hls_manifest_url=hls_url)

        player_response = extract_json_object(html, PLAYER_RESPONSE_MARKER)
        if player_response is not None:
            try:
                manifest = parse_player_response(player_response, source=self.name)
            except ValidationError:
                log.warning("watch_page_player_response_invalid", video_id=video_id)
            else:
                log.debug(
                    "watch_page_player_response_found",
                    video_id=video_id,
                    formats=len(manifest.formats),
                )
                return manifest

        log.warning("watch_page_no_data", video_id=video_id, size=len(html))
        raise StrategyFailure(self.name, FailureSignal.NO_DATA, "no player data in page")
