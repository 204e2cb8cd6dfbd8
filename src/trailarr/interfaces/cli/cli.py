from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from trailarr.domain.exceptions import ExtractionError
from trailarr.infrastructure.config import AppConfig, load_config
from trailarr.infrastructure.logging.setup import configure_logging
from trailarr.interfaces.api.trailers.presenter import render_error, render_stream
from trailarr.interfaces.composition import build_resolver, create_http_client
from trailarr.interfaces.main import build_app

log = structlog.get_logger(__name__)


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    """Config wiring flags shared by all subcommands (no business logic)."""
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="trailarr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )
    _add_config_args(serve)

    resolve = subparsers.add_parser(
        "resolve", help="Resolve one video id and print the result as JSON."
    )
    resolve.add_argument("video_id", help="YouTube video id, e.g. dQw4w9WgXcQ.")
    resolve.add_argument(
        "--strategies",
        default=None,
        help="Comma-separated strategy order (overrides config).",
    )
    resolve.add_argument(
        "--no-validate",
        action="store_true",
        help="Return the best candidate without probing it.",
    )
    _add_config_args(resolve)

    return parser.parse_args(list(argv) if argv is not None else None)


def _load(args: argparse.Namespace) -> AppConfig:
    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if getattr(args, "strategies", None):
        cli_overrides["resolver_strategies"] = args.strategies
    if getattr(args, "no_validate", False):
        cli_overrides["resolver_validate_streams"] = False

    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def _resolve_once(config: AppConfig, video_id: str) -> tuple[int, dict[str, Any]]:
    """Resolve *video_id* with a throwaway client; returns (exit code, payload)."""
    async with create_http_client(config) as http_client:
        resolver = build_resolver(config.resolver, http_client)
        try:
            stream = await resolver.resolve(video_id)
        except ExtractionError as e:
            return 1, render_error(e)
    if stream is None:
        return 1, {"error": "cancelled"}
    return 0, render_stream(stream)


def _serve(args: argparse.Namespace, config: AppConfig, log_config: dict[str, Any]) -> int:
    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "7980"))

    uvicorn.run(
        build_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )
    return 0


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Config is loaded exactly once here and handed down to whatever runs next.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)
    log_config = configure_logging(config)

    if args.command == "serve":
        return _serve(args, config, log_config)

    try:
        exit_code, payload = asyncio.run(_resolve_once(config, args.video_id))
    except ValueError as e:
        log.error("invalid_video_id", error=str(e))
        return 2
    print(json.dumps(payload, indent=2))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(start())
