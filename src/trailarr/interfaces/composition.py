"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import functools
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from trailarr.application.use_cases.resolve_trailer import TrailerResolveUseCase
from trailarr.domain.ports import ExtractionStrategyPort
from trailarr.infrastructure.config.schema import AppConfig, ResolverConfig
from trailarr.infrastructure.validation.stream_validator import HttpStreamValidator
from trailarr.infrastructure.youtube.codecs import CodecPolicy
from trailarr.infrastructure.youtube.constants import INNERTUBE_CLIENTS
from trailarr.infrastructure.youtube.format_selector import select_formats
from trailarr.infrastructure.youtube.innertube import InnertubeStrategy
from trailarr.infrastructure.youtube.watch_page import WatchPageStrategy
from trailarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def create_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared connection pool; per-request timeouts are set by each caller."""
    resolver = config.resolver
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            max(resolver.content_timeout_seconds, resolver.probe_timeout_seconds)
        ),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
        limits=httpx.Limits(max_connections=config.http_max_connections),
    )


def build_strategies(
    config: ResolverConfig, http_client: httpx.AsyncClient
) -> list[ExtractionStrategyPort]:
    """Instantiate the configured strategies in fallback order."""
    strategies: list[ExtractionStrategyPort] = []
    for name in config.strategies:
        if name == "watch_page":
            strategies.append(
                WatchPageStrategy(http_client, timeout=config.content_timeout_seconds)
            )
        else:
            strategies.append(
                InnertubeStrategy(
                    http_client,
                    INNERTUBE_CLIENTS[name],
                    timeout=config.content_timeout_seconds,
                )
            )
    return strategies


def build_resolver(
    config: ResolverConfig, http_client: httpx.AsyncClient
) -> TrailerResolveUseCase:
    """Wire strategies, selector and validator into the coordinator."""
    policy = CodecPolicy.from_names(
        config.allowed_video_codecs, config.allowed_audio_codecs
    )
    return TrailerResolveUseCase(
        strategies=build_strategies(config, http_client),
        validator=HttpStreamValidator(
            http_client, timeout_seconds=config.probe_timeout_seconds
        ),
        selector=functools.partial(select_formats, policy=policy),
        strategy_timeout=config.content_timeout_seconds,
        max_probes_per_strategy=config.max_probes_per_strategy,
        validate_streams=config.validate_streams,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: create the shared HTTP client and the resolver, close on exit."""
    state = cast(AppState, app.state)
    config = state.config

    state.http_client = create_http_client(config)
    log.info(
        "http_client_initialized",
        max_connections=config.http_max_connections,
        follow_redirects=config.http_follow_redirects,
    )

    state.trailer_resolver = build_resolver(config.resolver, state.http_client)
    log.info(
        "trailer_resolver_initialized",
        strategies=state.trailer_resolver.strategy_names,
        validate_streams=config.resolver.validate_streams,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
