"""Port for validating that a candidate media URL is reachable."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StreamValidatorPort(Protocol):
    """Probes a stream URL without downloading the media body.

    Implementations never raise for network problems; an unreachable URL
    is simply reported as ``False``.
    """

    async def probe(self, url: str) -> bool:
        """Return True if the URL answers with a 2xx status."""
        ...
