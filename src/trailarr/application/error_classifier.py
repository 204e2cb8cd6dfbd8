"""Maps strategy failures onto the caller-facing error taxonomy.

Pure functions.  The coordinator records one ``StrategyFailure`` per failed
attempt and classifies them all at once when the chain is exhausted, so a
specific signal seen by any strategy (an age gate, say) wins over generic
transport noise seen by the others.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from trailarr.domain.entities.streams import (
    ExtractionErrorKind,
    FailureSignal,
    PlayabilityStatus,
)
from trailarr.domain.exceptions import ExtractionError, StrategyFailure

_AGE_GATE_STATUSES = frozenset({"AGE_CHECK_REQUIRED", "AGE_VERIFICATION_REQUIRED"})
_LOGIN_REQUIRED_STATUS = "LOGIN_REQUIRED"

# "Sign in to confirm your age", "age-restricted", "inappropriate for some users"
_AGE_REASON_RE = re.compile(r"\bage\b|inappropriate", re.IGNORECASE)

# Highest precedence first.
_PRECEDENCE: tuple[tuple[FailureSignal, ExtractionErrorKind], ...] = (
    (FailureSignal.AGE_RESTRICTED, ExtractionErrorKind.AGE_RESTRICTED),
    (FailureSignal.LOGIN_REQUIRED, ExtractionErrorKind.LOGIN_REQUIRED),
    (FailureSignal.UNPLAYABLE, ExtractionErrorKind.VIDEO_UNAVAILABLE),
    (FailureSignal.NO_COMPATIBLE_CODEC, ExtractionErrorKind.NO_COMPATIBLE_CODEC),
)


def signal_for_playability(status: PlayabilityStatus) -> FailureSignal:
    """Translate a non-OK platform playability status into a failure signal."""
    code = status.status.upper()
    if code in _AGE_GATE_STATUSES:
        return FailureSignal.AGE_RESTRICTED
    if code == _LOGIN_REQUIRED_STATUS:
        if status.reason and _AGE_REASON_RE.search(status.reason):
            return FailureSignal.AGE_RESTRICTED
        return FailureSignal.LOGIN_REQUIRED
    return FailureSignal.UNPLAYABLE


def _first_reason(
    failures: Sequence[StrategyFailure], signal: FailureSignal
) -> str | None:
    for failure in failures:
        if failure.signal is signal and failure.reason:
            return failure.reason
    return None


def classify_failures(
    failures: Sequence[StrategyFailure], *, video_id: str | None = None
) -> ExtractionError:
    """Pick the single most specific error for an exhausted strategy chain.

    Precedence: age_restricted > login_required > video_unavailable >
    no_compatible_codec > network_error > all_streams_broken.  Network
    error is only reported when *every* attempt failed at the transport
    level; an empty failure list is all_streams_broken.
    """
    signals = {f.signal for f in failures}

    for signal, kind in _PRECEDENCE:
        if signal in signals:
            return ExtractionError(
                kind, _first_reason(failures, signal), video_id=video_id
            )

    if failures and signals == {FailureSignal.TRANSPORT}:
        return ExtractionError(
            ExtractionErrorKind.NETWORK_ERROR,
            _first_reason(failures, FailureSignal.TRANSPORT),
            video_id=video_id,
        )

    reason = next((f.reason for f in reversed(failures) if f.reason), None)
    return ExtractionError(
        ExtractionErrorKind.ALL_STREAMS_BROKEN, reason, video_id=video_id
    )
