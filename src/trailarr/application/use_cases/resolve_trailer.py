"""Trailer resolution use case (strategy chain coordinator).

video id -> strategy[0] -> select formats -> validate -> ResolvedStream
         -> strategy[1] -> ...
         -> exhausted: classify recorded failures -> ExtractionError
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from typing import Protocol

import structlog

from trailarr.application.error_classifier import (
    classify_failures,
    signal_for_playability,
)
from trailarr.domain.entities.streams import (
    CandidateFormat,
    FailureSignal,
    ResolvedStream,
    StreamingManifest,
)
from trailarr.domain.exceptions import StrategyFailure
from trailarr.domain.ports.extraction_strategy import ExtractionStrategyPort
from trailarr.domain.ports.stream_validator import StreamValidatorPort

log = structlog.get_logger(__name__)


class _Selection(Protocol):
    """Ranked candidates for one manifest, as produced by the format selector."""

    @property
    def hls_url(self) -> str | None: ...

    @property
    def videos(self) -> tuple[CandidateFormat, ...]: ...

    @property
    def audio(self) -> CandidateFormat | None: ...

    @property
    def combined(self) -> tuple[CandidateFormat, ...]: ...

    @property
    def is_empty(self) -> bool: ...

    def best(self) -> ResolvedStream | None: ...


_SelectorFn = Callable[[StreamingManifest], _Selection]


class TrailerResolveUseCase:
    """Resolves a video id into a directly playable, validated stream.

    Strategies run strictly in order, one at a time, each under its own
    wall-clock timeout.  A strategy fails for this call when it raises
    ``StrategyFailure``, times out, reports a non-OK playability status,
    offers nothing inside the codec envelope, or none of its probed
    candidates is reachable.  Failures are recorded silently and only
    classified once every strategy has failed.

    Within one strategy the validation cascade walks the ranked adaptive
    videos (then the combined formats) until a probe succeeds, probing at
    most ``max_probes_per_strategy`` video candidates plus one probe of the
    paired audio track.  HLS manifests are returned unprobed.

    Args:
        strategies: Extraction strategies in fallback order.
        validator: Reachability probe for candidate URLs.
        selector: Pure manifest -> ranked selection function.
        strategy_timeout: Seconds allowed per strategy attempt.
        max_probes_per_strategy: Video candidate probes per strategy.
        validate_streams: When False the best selection is returned unprobed.
    """

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategyPort],
        validator: StreamValidatorPort,
        selector: _SelectorFn,
        *,
        strategy_timeout: float = 15.0,
        max_probes_per_strategy: int = 4,
        validate_streams: bool = True,
    ) -> None:
        if not strategies:
            raise ValueError("at least one extraction strategy is required")
        self._strategies = tuple(strategies)
        self._validator = validator
        self._select = selector
        self._strategy_timeout = strategy_timeout
        self._max_probes = max(1, max_probes_per_strategy)
        self._validate_streams = validate_streams

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    async def resolve(
        self, video_id: str, *, cancel: asyncio.Event | None = None
    ) -> ResolvedStream | None:
        """Resolve *video_id* to a playable stream.

        Returns:
            The validated stream, or ``None`` if *cancel* fired first.

        Raises:
            ValueError: Empty video id (before any network call).
            ExtractionError: Every strategy failed; carries the classified kind.
        """
        video_id = video_id.strip()
        if not video_id:
            raise ValueError("video_id must not be empty")

        if cancel is None:
            return await self._run_chain(video_id)

        if cancel.is_set():
            log.info("trailer_resolve_cancelled", video_id=video_id, stage="before_start")
            return None

        chain = asyncio.ensure_future(self._run_chain(video_id))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({chain, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not chain.done():
                chain.cancel()
            await asyncio.gather(chain, waiter, return_exceptions=True)

        if chain.cancelled():
            log.info("trailer_resolve_cancelled", video_id=video_id, stage="in_flight")
            return None
        return chain.result()

    async def _run_chain(self, video_id: str) -> ResolvedStream:
        failures: list[StrategyFailure] = []
        t0 = time.perf_counter_ns()

        for strategy in self._strategies:
            try:
                stream = await self._attempt(strategy, video_id)
            except StrategyFailure as failure:
                failures.append(failure)
                log.info(
                    "trailer_strategy_failed",
                    video_id=video_id,
                    strategy=failure.strategy,
                    signal=failure.signal.value,
                    reason=failure.reason,
                    status=failure.status_code,
                )
                continue

            log.info(
                "trailer_resolved",
                video_id=video_id,
                strategy=strategy.name,
                quality=stream.quality_label,
                is_hls=stream.is_hls,
                has_audio=stream.audio_url is not None,
                attempts=len(failures) + 1,
                duration_ms=(time.perf_counter_ns() - t0) // 1_000_000,
            )
            return stream

        error = classify_failures(failures, video_id=video_id)
        log.warning(
            "trailer_resolve_failed",
            video_id=video_id,
            kind=error.kind.value,
            reason=error.reason,
            attempts=len(failures),
            duration_ms=(time.perf_counter_ns() - t0) // 1_000_000,
        )
        raise error

    async def _attempt(
        self, strategy: ExtractionStrategyPort, video_id: str
    ) -> ResolvedStream:
        """One strategy: fetch, judge playability, select, validate."""
        try:
            manifest = await asyncio.wait_for(
                strategy.attempt_resolve(video_id),
                timeout=self._strategy_timeout,
            )
        except TimeoutError as exc:
            raise StrategyFailure(
                strategy.name,
                FailureSignal.TRANSPORT,
                f"timed out after {self._strategy_timeout}s",
            ) from exc

        playability = manifest.playability
        if not playability.is_ok:
            raise StrategyFailure(
                strategy.name,
                signal_for_playability(playability),
                playability.reason or playability.status,
            )

        selection = self._select(manifest)
        if selection.is_empty:
            if manifest.has_direct_urls:
                raise StrategyFailure(
                    strategy.name,
                    FailureSignal.NO_COMPATIBLE_CODEC,
                    "no format within the supported codec set",
                )
            raise StrategyFailure(
                strategy.name, FailureSignal.NO_STREAMS, "no direct stream URLs"
            )

        stream = await self._validate(strategy.name, selection)
        if stream is None:
            raise StrategyFailure(
                strategy.name,
                FailureSignal.VALIDATION_FAILED,
                "all candidate streams unreachable",
            )
        return stream

    async def _validate(
        self, strategy_name: str, selection: _Selection
    ) -> ResolvedStream | None:
        """Walk the ranked candidates until one probes reachable."""
        if selection.hls_url:
            return ResolvedStream.from_hls(selection.hls_url)
        if not self._validate_streams:
            return selection.best()

        # Budget covers video candidates; the paired audio track gets its own probe.
        budget = self._max_probes

        for video in selection.videos:
            if budget <= 0:
                break
            budget -= 1
            if not await self._probe(strategy_name, video):
                continue
            audio = selection.audio
            if audio is not None and not await self._probe(strategy_name, audio):
                audio = None
            return ResolvedStream.from_adaptive(video, audio)

        for fmt in selection.combined:
            if budget <= 0:
                break
            budget -= 1
            if await self._probe(strategy_name, fmt):
                return ResolvedStream.from_combined(fmt)

        if budget <= 0:
            log.info("trailer_probe_budget_exhausted", strategy=strategy_name)
        return None

    async def _probe(self, strategy_name: str, fmt: CandidateFormat) -> bool:
        if not fmt.url:
            return False
        reachable = await self._validator.probe(fmt.url)
        if not reachable:
            log.debug(
                "trailer_candidate_unreachable",
                strategy=strategy_name,
                itag=fmt.itag,
                kind=fmt.kind.value,
                label=fmt.resolution_label,
            )
        return reachable
