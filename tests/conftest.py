"""Shared test fixtures for Trailarr test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

VIDEO_ID = "dQw4w9WgXcQ"
_GOOGLEVIDEO = "https://rr1---sn-test.googlevideo.com/videoplayback"
_HLS_URL = "https://manifest.googlevideo.com/api/manifest/hls_variant/expire/123/id/abc"


def _gv_url(itag: int) -> str:
    return f"{_GOOGLEVIDEO}?itag={itag}&id=abc&expire=1700000000"


def _fmt(itag: int, mime: str, **extra: Any) -> dict[str, Any]:
    return {"itag": itag, "url": _gv_url(itag), "mimeType": mime, **extra}


# ---------------------------------------------------------------------------
# Player response fixtures (shape of /youtubei/v1/player)
# ---------------------------------------------------------------------------


@pytest.fixture()
def video_id() -> str:
    return VIDEO_ID


@pytest.fixture()
def gv_url() -> Callable[[int], str]:
    """Builds the direct URL the fixtures use for a given itag."""
    return _gv_url


@pytest.fixture()
def hls_url() -> str:
    return _HLS_URL


@pytest.fixture()
def player_response() -> dict[str, Any]:
    """Typical ANDROID response: H.264 + VP9 adaptive, AAC + Opus audio, progressive."""
    return {
        "playabilityStatus": {"status": "OK"},
        "streamingData": {
            "adaptiveFormats": [
                _fmt(
                    137,
                    'video/mp4; codecs="avc1.640028"',
                    width=1920,
                    height=1080,
                    bitrate=4_500_000,
                    qualityLabel="1080p",
                ),
                _fmt(
                    248,
                    'video/webm; codecs="vp9"',
                    width=1920,
                    height=1080,
                    bitrate=3_000_000,
                    qualityLabel="1080p",
                ),
                _fmt(
                    136,
                    'video/mp4; codecs="avc1.4d401f"',
                    width=1280,
                    height=720,
                    bitrate=2_500_000,
                    qualityLabel="720p",
                ),
                _fmt(
                    140,
                    'audio/mp4; codecs="mp4a.40.2"',
                    bitrate=130_000,
                    audioQuality="AUDIO_QUALITY_MEDIUM",
                    audioSampleRate="44100",
                ),
                _fmt(
                    249,
                    'audio/webm; codecs="opus"',
                    bitrate=160_000,
                    audioQuality="AUDIO_QUALITY_LOW",
                    audioSampleRate="48000",
                ),
            ],
            "formats": [
                _fmt(
                    18,
                    'video/mp4; codecs="avc1.42001E, mp4a.40.2"',
                    width=640,
                    height=360,
                    bitrate=500_000,
                    qualityLabel="360p",
                ),
            ],
        },
    }


@pytest.fixture()
def vp9_only_response() -> dict[str, Any]:
    """Only VP9/AV1 video and Opus audio: nothing the player can decode."""
    return {
        "playabilityStatus": {"status": "OK"},
        "streamingData": {
            "adaptiveFormats": [
                _fmt(271, 'video/webm; codecs="vp9"', width=2560, height=1440),
                _fmt(399, 'video/mp4; codecs="av01.0.08M.08"', width=1920, height=1080),
                _fmt(251, 'audio/webm; codecs="opus"', bitrate=160_000),
            ],
        },
    }


@pytest.fixture()
def ciphered_response() -> dict[str, Any]:
    """Formats present but every one needs signature decryption."""
    return {
        "playabilityStatus": {"status": "OK"},
        "streamingData": {
            "adaptiveFormats": [
                {
                    "itag": 137,
                    "mimeType": 'video/mp4; codecs="avc1.640028"',
                    "height": 1080,
                    "signatureCipher": "s=abc&sp=sig&url=https%3A%2F%2Fexample",
                },
            ],
            "formats": [
                {
                    "itag": 18,
                    "mimeType": 'video/mp4; codecs="avc1.42001E, mp4a.40.2"',
                    "height": 360,
                    "signatureCipher": "s=def&sp=sig&url=https%3A%2F%2Fexample",
                },
            ],
        },
    }


@pytest.fixture()
def hls_response() -> dict[str, Any]:
    return {
        "playabilityStatus": {"status": "OK"},
        "streamingData": {
            "hlsManifestUrl": _HLS_URL,
            "adaptiveFormats": [
                _fmt(137, 'video/mp4; codecs="avc1.640028"', height=1080),
            ],
        },
    }


@pytest.fixture()
def unavailable_response() -> dict[str, Any]:
    return {"playabilityStatus": {"status": "ERROR", "reason": "Video unavailable"}}


@pytest.fixture()
def age_gated_response() -> dict[str, Any]:
    return {
        "playabilityStatus": {
            "status": "LOGIN_REQUIRED",
            "reason": "Sign in to confirm your age",
        }
    }


# ---------------------------------------------------------------------------
# Watch page fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def watch_page_hls_html() -> str:
    return (
        "<html><body><script>var ytInitialPlayerResponse = "
        '{"streamingData":{"hlsManifestUrl":"'
        + _HLS_URL
        + '"}};</script></body></html>'
    )


@pytest.fixture()
def watch_page_progressive_html() -> str:
    return (
        "<html><body><script>var ytInitialPlayerResponse = "
        '{"playabilityStatus":{"status":"OK"},"streamingData":{"formats":'
        '[{"itag":18,"url":"'
        + _gv_url(18)
        + '","mimeType":"video/mp4; codecs=\\"avc1.42001E, mp4a.40.2\\"",'
        '"width":640,"height":360,"qualityLabel":"360p"}]}};'
        "</script></body></html>"
    )
