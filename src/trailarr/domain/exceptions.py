"""Trailer resolution exceptions."""

from __future__ import annotations

from trailarr.domain.entities.streams import ExtractionErrorKind, FailureSignal

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

_USER_MESSAGES: dict[ExtractionErrorKind, str] = {
    ExtractionErrorKind.AGE_RESTRICTED: (
        "This trailer is age-restricted and cannot be played in-app."
    ),
    ExtractionErrorKind.LOGIN_REQUIRED: (
        "This trailer requires signing in to YouTube and cannot be played in-app."
    ),
    ExtractionErrorKind.NO_COMPATIBLE_CODEC: (
        "This trailer is not offered in a format the player can decode."
    ),
    ExtractionErrorKind.ALL_STREAMS_BROKEN: (
        "Could not load trailer: all stream URLs were inaccessible."
    ),
    ExtractionErrorKind.NETWORK_ERROR: (
        "Network error. Check your connection and try again."
    ),
}


class TrailerError(Exception):
    """Base class for all trailer resolution errors."""


class ExtractionError(TrailerError):
    """Classified failure returned once every strategy is exhausted."""

    def __init__(
        self,
        kind: ExtractionErrorKind,
        reason: str | None = None,
        *,
        video_id: str | None = None,
    ) -> None:
        self.kind = kind
        self.reason = reason
        self.video_id = video_id
        super().__init__(f"{kind.value}: {reason}" if reason else kind.value)

    @property
    def user_message(self) -> str:
        if self.kind is ExtractionErrorKind.VIDEO_UNAVAILABLE:
            return f"Trailer unavailable: {self.reason or 'video unavailable'}"
        return _USER_MESSAGES[self.kind]

    @property
    def watch_url(self) -> str | None:
        """Platform page the caller can open as a manual escape hatch."""
        if not self.video_id:
            return None
        return WATCH_URL_TEMPLATE.format(video_id=self.video_id)


class StrategyFailure(TrailerError):
    """Raised by a strategy (or recorded by the coordinator) for one failed attempt.

    Never surfaced to the caller directly; the coordinator collects these and
    hands them to the error classifier at chain exhaustion.
    """

    def __init__(
        self,
        strategy: str,
        signal: FailureSignal,
        reason: str | None = None,
        *,
        status_code: int | None = None,
    ) -> None:
        self.strategy = strategy
        self.signal = signal
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{strategy}: {signal.value}" + (f" ({reason})" if reason else ""))
