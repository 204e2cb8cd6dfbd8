"""Domain entities for trailer stream resolution.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

_MIME_CODECS_KEY = "codecs="


class FormatKind(str, enum.Enum):
    """What a candidate format carries."""

    VIDEO_ONLY = "video_only"
    AUDIO_ONLY = "audio_only"
    COMBINED = "combined"


def split_mime_type(mime_type: str) -> tuple[str, tuple[str, ...]]:
    """Split ``video/mp4; codecs="avc1.640028, mp4a.40.2"`` into parts.

    Returns the lowercased container (``"video/mp4"``) and the codec list
    (``("avc1.640028", "mp4a.40.2")``).  Missing codecs yield an empty tuple.
    """
    container, _, params = mime_type.partition(";")
    codecs: tuple[str, ...] = ()
    for param in params.split(";"):
        param = param.strip()
        if param.lower().startswith(_MIME_CODECS_KEY):
            raw = param[len(_MIME_CODECS_KEY) :].strip().strip('"').strip("'")
            codecs = tuple(c.strip().lower() for c in raw.split(",") if c.strip())
    return container.strip().lower(), codecs


@dataclass(frozen=True)
class CandidateFormat:
    """One stream variant offered by the platform."""

    kind: FormatKind
    mime_type: str = ""
    url: str | None = None  # None when the platform ciphers the signature
    itag: int | None = None
    width: int | None = None
    height: int | None = None
    bitrate: int | None = None
    quality_label: str | None = None  # platform label, e.g. "1080p60"

    @property
    def is_usable(self) -> bool:
        """Only formats with a direct URL can ever be selected."""
        return bool(self.url)

    @property
    def container(self) -> str:
        return split_mime_type(self.mime_type)[0]

    @property
    def codecs(self) -> tuple[str, ...]:
        return split_mime_type(self.mime_type)[1]

    @property
    def resolution_label(self) -> str:
        """Human resolution label ("1080p"), falling back to the platform label."""
        if self.height:
            return f"{self.height}p"
        return self.quality_label or "unknown"


@dataclass(frozen=True)
class PlayabilityStatus:
    """Platform-reported playability, independent of the listed formats."""

    status: str = "OK"
    reason: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.status.upper() == "OK"


@dataclass(frozen=True)
class StreamingManifest:
    """Output of one extraction strategy."""

    source: str
    playability: PlayabilityStatus = field(default_factory=PlayabilityStatus)
    formats: tuple[CandidateFormat, ...] = ()
    hls_manifest_url: str | None = None

    @property
    def has_direct_urls(self) -> bool:
        return bool(self.hls_manifest_url) or any(f.is_usable for f in self.formats)


HLS_QUALITY_LABEL = "HLS"
NO_AUDIO_SUFFIX = " (no audio)"


@dataclass(frozen=True)
class ResolvedStream:
    """Final engine output handed to the playback component."""

    video_url: str
    quality_label: str
    audio_url: str | None = None  # None for combined or HLS streams
    is_hls: bool = False

    @classmethod
    def from_hls(cls, manifest_url: str) -> ResolvedStream:
        return cls(video_url=manifest_url, quality_label=HLS_QUALITY_LABEL, is_hls=True)

    @classmethod
    def from_adaptive(
        cls, video: CandidateFormat, audio: CandidateFormat | None = None
    ) -> ResolvedStream:
        """Split stream; labelled "(no audio)" when no audio track is paired."""
        if audio is None or not audio.url:
            return cls(
                video_url=video.url or "",
                quality_label=f"{video.resolution_label}{NO_AUDIO_SUFFIX}",
            )
        return cls(
            video_url=video.url or "",
            audio_url=audio.url,
            quality_label=video.resolution_label,
        )

    @classmethod
    def from_combined(cls, fmt: CandidateFormat) -> ResolvedStream:
        return cls(video_url=fmt.url or "", quality_label=fmt.resolution_label)


class ExtractionErrorKind(str, enum.Enum):
    """Closed failure taxonomy surfaced to the caller."""

    VIDEO_UNAVAILABLE = "video_unavailable"
    AGE_RESTRICTED = "age_restricted"
    LOGIN_REQUIRED = "login_required"
    NO_COMPATIBLE_CODEC = "no_compatible_codec"
    ALL_STREAMS_BROKEN = "all_streams_broken"
    NETWORK_ERROR = "network_error"


class FailureSignal(str, enum.Enum):
    """What a single strategy attempt observed when it failed."""

    TRANSPORT = "transport"  # timeout, connection error, non-2xx, bad body
    UNPLAYABLE = "unplayable"  # ERROR / UNPLAYABLE / other non-OK status
    LOGIN_REQUIRED = "login_required"
    AGE_RESTRICTED = "age_restricted"
    NO_STREAMS = "no_streams"  # OK status but no direct URLs at all
    NO_COMPATIBLE_CODEC = "no_compatible_codec"
    VALIDATION_FAILED = "validation_failed"
    NO_DATA = "no_data"  # watch page had neither HLS URL nor player JSON
