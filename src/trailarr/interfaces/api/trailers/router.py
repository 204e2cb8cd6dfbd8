"""Trailer resolution endpoint."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from trailarr.domain.exceptions import ExtractionError
from trailarr.interfaces.api.trailers.presenter import (
    render_error,
    render_stream,
    status_code_for,
)
from trailarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["trailers"])

# Nginx convention for "client closed request"; nobody reads the body.
_CLIENT_CLOSED_REQUEST = 499
_DISCONNECT_POLL_SECONDS = 0.5


async def _watch_disconnect(request: Request, cancel: asyncio.Event) -> None:
    """Set *cancel* as soon as the client goes away."""
    while not cancel.is_set():
        if await request.is_disconnected():
            log.info("trailer_client_disconnected", path=request.url.path)
            cancel.set()
            return
        await asyncio.sleep(_DISCONNECT_POLL_SECONDS)


@router.get("/trailers/{video_id}")
async def resolve_trailer(request: Request, video_id: str) -> JSONResponse:
    """Resolve a YouTube video id into directly playable stream URLs.

    200 carries ``{video_url, audio_url, quality_label, is_hls}``; failures
    carry ``{error, message, reason, watch_url}`` with a status derived from
    the error kind.
    """
    state = cast(AppState, request.app.state)
    cancel = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel))

    try:
        stream = await state.trailer_resolver.resolve(video_id, cancel=cancel)
    except ValueError as e:
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_video_id", "message": str(e)},
        )
    except ExtractionError as e:
        return JSONResponse(status_code=status_code_for(e), content=render_error(e))
    finally:
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await watcher

    if stream is None:
        return JSONResponse(
            status_code=_CLIENT_CLOSED_REQUEST, content={"error": "cancelled"}
        )
    return JSONResponse(content=render_stream(stream))
