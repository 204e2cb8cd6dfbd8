"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from typing import Any

import pytest

from trailarr.infrastructure.config import AppConfig
from trailarr.interfaces.cli import cli


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda config: {})


class TestParseArgs:
    def test_serve(self) -> None:
        args = cli._parse_args(["serve", "--port", "9000", "--log-level", "DEBUG"])
        assert args.command == "serve"
        assert args.port == 9000
        assert args.log_level == "DEBUG"

    def test_resolve(self) -> None:
        args = cli._parse_args(
            ["resolve", "abc123", "--strategies", "watch_page", "--no-validate"]
        )
        assert args.command == "resolve"
        assert args.video_id == "abc123"
        assert args.strategies == "watch_page"
        assert args.no_validate is True

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli._parse_args([])


class TestLoad:
    def test_resolve_flags_become_overrides(self) -> None:
        args = cli._parse_args(
            [
                "resolve",
                "abc",
                "--strategies",
                "watch_page,innertube_embedded",
                "--no-validate",
                "--log-format",
                "json",
            ]
        )
        config = cli._load(args)

        assert config.resolver.strategies == ["watch_page", "innertube_embedded"]
        assert config.resolver.validate_streams is False
        assert config.log_format == "json"


class TestStart:
    def test_resolve_success_prints_json(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        seen: dict[str, Any] = {}

        async def _fake_resolve(config: AppConfig, video_id: str) -> tuple[int, dict]:
            seen["video_id"] = video_id
            return 0, {"video_url": "https://cdn/v", "quality_label": "720p"}

        monkeypatch.setattr(cli, "_resolve_once", _fake_resolve)

        exit_code = cli.start(["resolve", "abc123"])

        assert exit_code == 0
        assert seen["video_id"] == "abc123"
        assert json.loads(capsys.readouterr().out) == {
            "video_url": "https://cdn/v",
            "quality_label": "720p",
        }

    def test_resolve_failure_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        async def _fake_resolve(config: AppConfig, video_id: str) -> tuple[int, dict]:
            return 1, {"error": "network_error"}

        monkeypatch.setattr(cli, "_resolve_once", _fake_resolve)

        assert cli.start(["resolve", "abc123"]) == 1
        assert json.loads(capsys.readouterr().out)["error"] == "network_error"

    def test_serve_runs_uvicorn(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: dict[str, Any] = {}

        def _fake_run(app: Any, **kwargs: Any) -> None:
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr(cli.uvicorn, "run", _fake_run)

        assert cli.start(["serve", "--host", "127.0.0.1", "--port", "9001"]) == 0
        assert calls["host"] == "127.0.0.1"
        assert calls["port"] == 9001
        assert calls["app"].title == "Trailarr"
