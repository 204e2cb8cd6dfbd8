"""Internal player API strategy (``/youtubei/v1/player``).

One POST per attempt, emulating a specific client whose responses carry
direct (un-ciphered) format URLs.  The response JSON is mapped onto a
``StreamingManifest``; judging playability is left to the coordinator.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from trailarr.domain.entities.streams import FailureSignal, StreamingManifest
from trailarr.domain.exceptions import StrategyFailure
from trailarr.infrastructure.youtube.constants import (
    ANDROID_CLIENT,
    PLAYER_API_URL,
    InnertubeClient,
)
from trailarr.infrastructure.youtube.manifest_parser import parse_player_response

log = structlog.get_logger(__name__)


def build_player_request(video_id: str, client: InnertubeClient) -> dict[str, Any]:
    """JSON body for a player request."""
    return {
        "videoId": video_id,
        "contentCheckOk": True,
        "racyCheckOk": True,
        "context": client.context(),
    }


class InnertubeStrategy:
    """Resolves a video via the private player endpoint as *client*."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client: InnertubeClient = ANDROID_CLIENT,
        *,
        timeout: float = 15.0,
    ) -> None:
        self._http = http_client
        self._client = client
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._client.strategy_name

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._client.user_agent:
            headers["User-Agent"] = self._client.user_agent
        return headers

    async def attempt_resolve(self, video_id: str) -> StreamingManifest:
        try:
            resp = await self._http.post(
                PLAYER_API_URL,
                json=build_player_request(video_id, self._client),
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            log.warning("innertube_timeout", strategy=self.name, video_id=video_id)
            raise StrategyFailure(
                self.name, FailureSignal.TRANSPORT, "request timed out"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning(
                "innertube_request_failed",
                strategy=self.name,
                video_id=video_id,
                error=str(exc),
            )
            raise StrategyFailure(self.name, FailureSignal.TRANSPORT, str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            log.warning(
                "innertube_http_error",
                strategy=self.name,
                video_id=video_id,
                status=resp.status_code,
            )
            raise StrategyFailure(
                self.name,
                FailureSignal.TRANSPORT,
                f"HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            manifest = parse_player_response(resp.json(), source=self.name)
        except (ValueError, ValidationError) as exc:
            log.warning("innertube_invalid_json", strategy=self.name, video_id=video_id)
            raise StrategyFailure(
                self.name, FailureSignal.TRANSPORT, "undecodable player response"
            ) from exc

        log.debug(
            "innertube_manifest_parsed",
            strategy=self.name,
            video_id=video_id,
            status=manifest.playability.status,
            formats=len(manifest.formats),
            hls=manifest.hls_manifest_url is not None,
        )
        return manifest
