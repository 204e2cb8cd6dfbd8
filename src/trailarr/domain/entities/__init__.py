from .streams import (
    HLS_QUALITY_LABEL,
    NO_AUDIO_SUFFIX,
    CandidateFormat,
    ExtractionErrorKind,
    FailureSignal,
    FormatKind,
    PlayabilityStatus,
    ResolvedStream,
    StreamingManifest,
    split_mime_type,
)

__all__ = [
    "HLS_QUALITY_LABEL",
    "NO_AUDIO_SUFFIX",
    "CandidateFormat",
    "ExtractionErrorKind",
    "FailureSignal",
    "FormatKind",
    "PlayabilityStatus",
    "ResolvedStream",
    "StreamingManifest",
    "split_mime_type",
]
