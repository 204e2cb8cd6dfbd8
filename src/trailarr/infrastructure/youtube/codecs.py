"""Codec compatibility envelope of the target playback component.

The player decodes H.264/HEVC video and AAC audio in MP4 containers only.
VP9, AV1, Opus and Vorbis (WebM) must never be selected.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from trailarr.domain.entities.streams import split_mime_type

DEFAULT_VIDEO_CODECS: frozenset[str] = frozenset({"avc1", "avc3", "hev1", "hvc1"})
DEFAULT_AUDIO_CODECS: frozenset[str] = frozenset({"mp4a"})

_VIDEO_CONTAINERS: frozenset[str] = frozenset({"video/mp4"})
_AUDIO_CONTAINERS: frozenset[str] = frozenset({"audio/mp4"})


def codec_family(codec: str) -> str:
    """``"avc1.640028"`` -> ``"avc1"``; ``"opus"`` -> ``"opus"``."""
    return codec.split(".", 1)[0].strip().lower()


@dataclass(frozen=True)
class CodecPolicy:
    """Allowed codec families for video and audio tracks."""

    video_codecs: frozenset[str] = DEFAULT_VIDEO_CODECS
    audio_codecs: frozenset[str] = DEFAULT_AUDIO_CODECS

    @classmethod
    def from_names(
        cls, video_codecs: Iterable[str], audio_codecs: Iterable[str]
    ) -> CodecPolicy:
        return cls(
            video_codecs=frozenset(codec_family(c) for c in video_codecs),
            audio_codecs=frozenset(codec_family(c) for c in audio_codecs),
        )

    def is_compatible_video(self, mime_type: str) -> bool:
        """True for an MP4 video whose codecs are all decodable.

        Combined formats list their audio codec too, so audio families from
        the allowed audio set are accepted alongside at least one video codec.
        A bare mime type without codecs is judged by container alone.
        """
        container, codecs = split_mime_type(mime_type)
        if container not in _VIDEO_CONTAINERS:
            return False
        if not codecs:
            return True
        families = {codec_family(c) for c in codecs}
        if not families & self.video_codecs:
            return False
        return families <= (self.video_codecs | self.audio_codecs)

    def is_compatible_audio(self, mime_type: str) -> bool:
        """True for AAC (mp4a) in an MP4 container."""
        container, codecs = split_mime_type(mime_type)
        if container not in _AUDIO_CONTAINERS:
            return False
        if not codecs:
            return True
        return all(codec_family(c) in self.audio_codecs for c in codecs)
