"""Port for one technique that obtains a streaming manifest from the platform."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from trailarr.domain.entities.streams import StreamingManifest


@runtime_checkable
class ExtractionStrategyPort(Protocol):
    """Fetches and decodes the platform's description of a video's streams.

    Implementations perform exactly one network call per attempt and raise
    ``StrategyFailure`` when they cannot produce a manifest (transport error,
    undecodable body, nothing found).  A manifest with a non-OK playability
    status is still *returned*; judging it is the coordinator's job.
    """

    @property
    def name(self) -> str:
        """Strategy name used in logs and failure records (e.g. 'watch_page')."""
        ...

    async def attempt_resolve(self, video_id: str) -> StreamingManifest:
        """Return the manifest for *video_id* or raise ``StrategyFailure``."""
        ...
