"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "trailarr",
    "environment": "dev",
    "http": {
        "follow_redirects": True,
        "user_agent": "Trailarr/0.1.0",
        "max_connections": 20,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "resolver": {
        "strategies": ["innertube_android", "innertube_embedded", "watch_page"],
        "content_timeout_seconds": 15.0,
        "probe_timeout_seconds": 10.0,
        "max_probes_per_strategy": 4,
        "validate_streams": True,
        "allowed_video_codecs": ["avc1", "avc3", "hev1", "hvc1"],
        "allowed_audio_codecs": ["mp4a"],
    },
}
