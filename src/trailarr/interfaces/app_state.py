"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from trailarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from trailarr.application.use_cases.resolve_trailer import TrailerResolveUseCase


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient

    # Application Services
    trailer_resolver: TrailerResolveUseCase
