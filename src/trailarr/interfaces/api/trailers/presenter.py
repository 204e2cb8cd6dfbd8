"""JSON presenter for trailer resolution results and errors."""

from __future__ import annotations

from typing import Any

from trailarr.domain.entities.streams import ExtractionErrorKind, ResolvedStream
from trailarr.domain.exceptions import ExtractionError

ERROR_STATUS_CODES: dict[ExtractionErrorKind, int] = {
    ExtractionErrorKind.VIDEO_UNAVAILABLE: 404,
    ExtractionErrorKind.AGE_RESTRICTED: 403,
    ExtractionErrorKind.LOGIN_REQUIRED: 403,
    ExtractionErrorKind.NO_COMPATIBLE_CODEC: 422,
    ExtractionErrorKind.ALL_STREAMS_BROKEN: 502,
    ExtractionErrorKind.NETWORK_ERROR: 502,
}


def render_stream(stream: ResolvedStream) -> dict[str, Any]:
    return {
        "video_url": stream.video_url,
        "audio_url": stream.audio_url,
        "quality_label": stream.quality_label,
        "is_hls": stream.is_hls,
    }


def render_error(error: ExtractionError) -> dict[str, Any]:
    """Error body: machine-readable kind, user sentence and an external fallback link."""
    return {
        "error": error.kind.value,
        "message": error.user_message,
        "reason": error.reason,
        "watch_url": error.watch_url,
    }


def status_code_for(error: ExtractionError) -> int:
    return ERROR_STATUS_CODES.get(error.kind, 502)
