"""Resilient schema for YouTube player responses.

The player response is undocumented and drifts without notice, so every
model ignores unknown keys and every field degrades to its default instead
of failing the whole parse.  Only a body that is not a JSON object at all
is rejected (``pydantic.ValidationError``).
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from trailarr.domain.entities.streams import (
    CandidateFormat,
    FormatKind,
    PlayabilityStatus,
    StreamingManifest,
    split_mime_type,
)

log = structlog.get_logger(__name__)


def _lenient_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _lenient_str(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _dict_items(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FormatPayload(_Payload):
    """One entry of ``formats`` / ``adaptiveFormats``."""

    itag: int | None = None
    url: str | None = None
    mime_type: str = Field(default="", alias="mimeType")
    width: int | None = None
    height: int | None = None
    bitrate: int | None = None
    quality_label: str | None = Field(default=None, alias="qualityLabel")
    audio_quality: str | None = Field(default=None, alias="audioQuality")
    audio_sample_rate: str | None = Field(default=None, alias="audioSampleRate")
    signature_cipher: str | None = Field(default=None, alias="signatureCipher")

    @field_validator("itag", "width", "height", "bitrate", mode="before")
    @classmethod
    def _ints(cls, v: Any) -> int | None:
        return _lenient_int(v)

    @field_validator(
        "quality_label",
        "audio_quality",
        "audio_sample_rate",
        "signature_cipher",
        mode="before",
    )
    @classmethod
    def _strs(cls, v: Any) -> str | None:
        return _lenient_str(v)

    @field_validator("url", mode="before")
    @classmethod
    def _url(cls, v: Any) -> str | None:
        url = _lenient_str(v)
        return url if url and url.startswith(("https://", "http://")) else None

    @field_validator("mime_type", mode="before")
    @classmethod
    def _mime(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class StreamingDataPayload(_Payload):
    adaptive_formats: list[FormatPayload] = Field(
        default_factory=list, alias="adaptiveFormats"
    )
    formats: list[FormatPayload] = Field(default_factory=list)
    hls_manifest_url: str | None = Field(default=None, alias="hlsManifestUrl")

    @field_validator("adaptive_formats", "formats", mode="before")
    @classmethod
    def _format_lists(cls, v: Any) -> list[dict[str, Any]]:
        return _dict_items(v)

    @field_validator("hls_manifest_url", mode="before")
    @classmethod
    def _hls(cls, v: Any) -> str | None:
        return v if isinstance(v, str) and v.startswith("http") else None


class PlayabilityPayload(_Payload):
    # A response without playabilityStatus is treated as playable.
    status: str = "OK"
    reason: str | None = None
    messages: list[str] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> str:
        return v if isinstance(v, str) and v else "OK"

    @field_validator("reason", mode="before")
    @classmethod
    def _reason(cls, v: Any) -> str | None:
        return _lenient_str(v)

    @field_validator("messages", mode="before")
    @classmethod
    def _messages(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [m for m in v if isinstance(m, str)]


class PlayerResponsePayload(_Payload):
    """Top level of ``/youtubei/v1/player`` and ``ytInitialPlayerResponse``."""

    playability_status: PlayabilityPayload = Field(
        default_factory=PlayabilityPayload, alias="playabilityStatus"
    )
    streaming_data: StreamingDataPayload | None = Field(
        default=None, alias="streamingData"
    )

    @field_validator("playability_status", mode="before")
    @classmethod
    def _playability(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @field_validator("streaming_data", mode="before")
    @classmethod
    def _streaming(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


def _adaptive_kind(payload: FormatPayload) -> FormatKind:
    """Infer the track kind of an adaptive format.

    The mime major type decides; without one, audio-only fields win over
    dimensions.
    """
    container, _ = split_mime_type(payload.mime_type)
    major = container.split("/", 1)[0]
    if major == "audio":
        return FormatKind.AUDIO_ONLY
    if major == "video":
        return FormatKind.VIDEO_ONLY
    if payload.audio_quality or payload.audio_sample_rate:
        return FormatKind.AUDIO_ONLY
    return FormatKind.VIDEO_ONLY


def _to_candidate(payload: FormatPayload, kind: FormatKind) -> CandidateFormat:
    return CandidateFormat(
        kind=kind,
        mime_type=payload.mime_type,
        url=payload.url or None,
        itag=payload.itag,
        width=payload.width,
        height=payload.height,
        bitrate=payload.bitrate,
        quality_label=payload.quality_label,
    )


def playability_from_payload(payload: PlayabilityPayload) -> PlayabilityStatus:
    reason = payload.reason or (payload.messages[0] if payload.messages else None)
    return PlayabilityStatus(status=payload.status.upper(), reason=reason)


def parse_player_response(data: Any, *, source: str) -> StreamingManifest:
    """Map a decoded player response onto a ``StreamingManifest``.

    Raises ``pydantic.ValidationError`` only when *data* is not an object.
    When playability is not OK the formats are not parsed at all.
    """
    payload = PlayerResponsePayload.model_validate(data)
    playability = playability_from_payload(payload.playability_status)

    if not playability.is_ok or payload.streaming_data is None:
        return StreamingManifest(source=source, playability=playability)

    streaming = payload.streaming_data
    formats = [
        _to_candidate(p, _adaptive_kind(p)) for p in streaming.adaptive_formats
    ]
    formats.extend(_to_candidate(p, FormatKind.COMBINED) for p in streaming.formats)

    ciphered = sum(1 for f in formats if not f.is_usable)
    if ciphered:
        log.debug("manifest_ciphered_formats_skipped", source=source, count=ciphered)

    return StreamingManifest(
        source=source,
        playability=playability,
        formats=tuple(formats),
        hls_manifest_url=streaming.hls_manifest_url,
    )
