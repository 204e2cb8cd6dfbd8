"""Format selection and codec filtering for YouTube streaming manifests.

Pure and deterministic: the same manifest always yields the same selection.
Ranking:
    1. HLS manifest URL, unconditionally (the player negotiates quality itself)
    2. Adaptive video (allowed codecs), height desc then bitrate desc,
       paired with the highest-bitrate allowed audio
    3. Combined (progressive) formats, height desc
"""

from __future__ import annotations

from dataclasses import dataclass

from trailarr.domain.entities.streams import (
    CandidateFormat,
    FormatKind,
    ResolvedStream,
    StreamingManifest,
)
from trailarr.infrastructure.youtube.codecs import CodecPolicy

_DEFAULT_POLICY = CodecPolicy()


def _video_rank(fmt: CandidateFormat) -> tuple[int, int]:
    return (fmt.height or 0, fmt.bitrate or 0)


def _audio_rank(fmt: CandidateFormat) -> int:
    return fmt.bitrate or 0


@dataclass(frozen=True)
class FormatSelection:
    """Ranked, codec-filtered candidates drawn from one manifest."""

    hls_url: str | None = None
    videos: tuple[CandidateFormat, ...] = ()
    audio: CandidateFormat | None = None
    combined: tuple[CandidateFormat, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.hls_url or self.videos or self.combined)

    def best(self) -> ResolvedStream | None:
        """The single best choice, before any reachability validation."""
        if self.hls_url:
            return ResolvedStream.from_hls(self.hls_url)
        if self.videos:
            return ResolvedStream.from_adaptive(self.videos[0], self.audio)
        if self.combined:
            return ResolvedStream.from_combined(self.combined[0])
        return None


def select_formats(
    manifest: StreamingManifest,
    policy: CodecPolicy = _DEFAULT_POLICY,
) -> FormatSelection:
    """Filter and rank a manifest's formats for the target player.

    A non-OK playability status short-circuits to an empty selection even
    when formats are present.  Formats without a direct URL are dropped
    before any ranking.
    """
    if not manifest.playability.is_ok:
        return FormatSelection()

    if manifest.hls_manifest_url:
        return FormatSelection(hls_url=manifest.hls_manifest_url)

    usable = [f for f in manifest.formats if f.is_usable]

    videos = sorted(
        (
            f
            for f in usable
            if f.kind is FormatKind.VIDEO_ONLY
            and policy.is_compatible_video(f.mime_type)
        ),
        key=_video_rank,
        reverse=True,
    )
    audios = [
        f
        for f in usable
        if f.kind is FormatKind.AUDIO_ONLY and policy.is_compatible_audio(f.mime_type)
    ]
    # Combined formats on this platform are always H.264 + AAC.
    combined = sorted(
        (f for f in usable if f.kind is FormatKind.COMBINED),
        key=_video_rank,
        reverse=True,
    )

    return FormatSelection(
        videos=tuple(videos),
        audio=max(audios, key=_audio_rank) if audios else None,
        combined=tuple(combined),
    )
