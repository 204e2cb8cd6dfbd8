"""Tests for WatchPageStrategy (HTML scraping fallback)."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
import respx

from trailarr.domain.entities import FailureSignal, FormatKind
from trailarr.domain.exceptions import StrategyFailure
from trailarr.infrastructure.youtube import watch_page
from trailarr.infrastructure.youtube.constants import WATCH_URL
from trailarr.infrastructure.youtube.watch_page import (
    PLAYER_RESPONSE_MARKER,
    WatchPageStrategy,
    extract_hls_url,
    extract_json_object,
)


class TestExtractHlsUrl:
    def test_plain(self, watch_page_hls_html: str, hls_url: str) -> None:
        assert extract_hls_url(watch_page_hls_html) == hls_url

    def test_js_escaped(self) -> None:
        html = (
            '"hlsManifestUrl":"https:\\/\\/manifest.googlevideo.com\\/api\\/manifest'
            '\\/hls_variant\\/id\\/abc?x=1\\u0026y=2"'
        )
        assert extract_hls_url(html) == (
            "https://manifest.googlevideo.com/api/manifest/hls_variant/id/abc?x=1&y=2"
        )

    def test_other_host_is_ignored(self) -> None:
        html = '"hlsManifestUrl":"https://evil.example.com/x.m3u8"'
        assert extract_hls_url(html) is None

    def test_absent(self) -> None:
        assert extract_hls_url("<html></html>") is None


class TestExtractJsonObject:
    def test_braces_and_script_end_inside_strings(self) -> None:
        html = (
            "<script>var ytInitialPlayerResponse = "
            '{"videoDetails":{"title":"Trailer };</script> {weird}"},'
            '"playabilityStatus":{"status":"OK"}};'
            "var other = {};</script>"
        )
        obj = extract_json_object(html, PLAYER_RESPONSE_MARKER)

        assert obj is not None
        assert obj["videoDetails"]["title"] == "Trailer };</script> {weird}"
        assert obj["playabilityStatus"] == {"status": "OK"}

    def test_later_occurrence_used_when_first_is_broken(self) -> None:
        text = (
            "ytInitialPlayerResponse = {broken;"
            ' var ytInitialPlayerResponse = {"a": 1};'
        )
        assert extract_json_object(text, PLAYER_RESPONSE_MARKER) == {"a": 1}

    def test_marker_missing(self) -> None:
        assert extract_json_object("<html></html>", PLAYER_RESPONSE_MARKER) is None

    def test_no_brace_after_marker(self) -> None:
        text = "ytInitialPlayerResponse = null"
        assert extract_json_object(text, PLAYER_RESPONSE_MARKER) is None


class TestWatchPageStrategy:
    def test_name(self) -> None:
        assert WatchPageStrategy(httpx.AsyncClient()).name == "watch_page"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_request_headers(self, watch_page_hls_html: str, video_id: str) -> None:
        route = respx.get(WATCH_URL, params={"v": video_id}).respond(
            200, text=watch_page_hls_html
        )

        async with httpx.AsyncClient() as client:
            await WatchPageStrategy(client).attempt_resolve(video_id)

        request = route.calls.last.request
        assert request.url.params["v"] == video_id
        assert "Safari" in request.headers["User-Agent"]
        assert request.headers["Accept-Language"] == "en-US,en;q=0.9"
        assert request.headers["Cookie"] == "CONSENT=PENDING+999"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_hls_found_first(
        self,
        watch_page_hls_html: str,
        hls_url: str,
        video_id: str,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _must_not_run(*args: object, **kwargs: object) -> None:
            raise AssertionError("JSON extraction should not run when HLS is found")

        monkeypatch.setattr(watch_page, "extract_json_object", _must_not_run)
        respx.get(WATCH_URL, params={"v": video_id}).respond(
            200, text=watch_page_hls_html
        )

        async with httpx.AsyncClient() as client:
            manifest = await WatchPageStrategy(client).attempt_resolve(video_id)

        assert manifest.source == "watch_page"
        assert manifest.hls_manifest_url == hls_url
        assert manifest.formats == ()

    @respx.mock
    @pytest.mark.asyncio()
    async def test_embedded_player_response(
        self,
        watch_page_progressive_html: str,
        gv_url: Callable[[int], str],
        video_id: str,
    ) -> None:
        respx.get(WATCH_URL, params={"v": video_id}).respond(
            200, text=watch_page_progressive_html
        )

        async with httpx.AsyncClient() as client:
            manifest = await WatchPageStrategy(client).attempt_resolve(video_id)

        assert manifest.hls_manifest_url is None
        assert len(manifest.formats) == 1
        fmt = manifest.formats[0]
        assert fmt.kind is FormatKind.COMBINED
        assert fmt.itag == 18
        assert fmt.url == gv_url(18)
        assert fmt.height == 360

    @respx.mock
    @pytest.mark.asyncio()
    async def test_embedded_non_ok_status(self, video_id: str) -> None:
        html = (
            "<script>var ytInitialPlayerResponse = "
            '{"playabilityStatus":{"status":"LOGIN_REQUIRED",'
            '"reason":"Sign in to confirm your age"}};</script>'
        )
        respx.get(WATCH_URL, params={"v": video_id}).respond(200, text=html)

        async with httpx.AsyncClient() as client:
            manifest = await WatchPageStrategy(client).attempt_resolve(video_id)

        assert manifest.playability.status == "LOGIN_REQUIRED"
        assert manifest.playability.reason == "Sign in to confirm your age"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_no_data(self, video_id: str) -> None:
        respx.get(WATCH_URL, params={"v": video_id}).respond(
            200, text="<html><body>consent wall</body></html>"
        )

        async with httpx.AsyncClient() as client:
            with pytest.raises(StrategyFailure) as exc_info:
                await WatchPageStrategy(client).attempt_resolve(video_id)

        assert exc_info.value.signal is FailureSignal.NO_DATA
        assert exc_info.value.strategy == "watch_page"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_http_error(self, video_id: str) -> None:
        respx.get(WATCH_URL, params={"v": video_id}).respond(429)

        async with httpx.AsyncClient() as client:
            with pytest.raises(StrategyFailure) as exc_info:
                await WatchPageStrategy(client).attempt_resolve(video_id)

        assert exc_info.value.signal is FailureSignal.TRANSPORT
        assert exc_info.value.status_code == 429

    @respx.mock
    @pytest.mark.asyncio()
    async def test_timeout(self, video_id: str) -> None:
        respx.get(WATCH_URL, params={"v": video_id}).mock(
            side_effect=httpx.ConnectTimeout("timed out")
        )

        async with httpx.AsyncClient() as client:
            with pytest.raises(StrategyFailure) as exc_info:
                await WatchPageStrategy(client).attempt_resolve(video_id)

        assert exc_info.value.signal is FailureSignal.TRANSPORT
