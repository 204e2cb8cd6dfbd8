"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

KNOWN_STRATEGIES: tuple[str, ...] = (
    "innertube_android",
    "innertube_embedded",
    "watch_page",
)


def _split_csv(value: Any) -> Any:
    """Accept ``"a, b"`` as well as a list for list-valued settings."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class ResolverConfig(BaseModel):
    """Strategy chain, timeouts and codec envelope.

    All values configurable via YAML (resolver section) or ENV vars.
    """

    strategies: list[str] = Field(
        default_factory=lambda: list(KNOWN_STRATEGIES),
        description="Extraction strategies in fallback order.",
    )
    content_timeout_seconds: float = Field(
        default=15.0,
        description="Wall-clock timeout per strategy attempt (seconds).",
    )
    probe_timeout_seconds: float = Field(
        default=10.0,
        description="Per-URL reachability probe timeout (seconds).",
    )
    max_probes_per_strategy: int = Field(
        default=4,
        description="Max video candidates probed before moving to the next strategy.",
    )
    validate_streams: bool = Field(
        default=True,
        description="Probe candidate URLs before returning them.",
    )
    allowed_video_codecs: list[str] = Field(
        default_factory=lambda: ["avc1", "avc3", "hev1", "hvc1"],
        description="Video codec families the player can decode.",
    )
    allowed_audio_codecs: list[str] = Field(
        default_factory=lambda: ["mp4a"],
        description="Audio codec families the player can decode.",
    )

    @field_validator(
        "strategies", "allowed_video_codecs", "allowed_audio_codecs", mode="before"
    )
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return _split_csv(v)

    @field_validator("strategies")
    @classmethod
    def _validate_strategies(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("resolver.strategies must not be empty")
        unknown = [s for s in v if s not in KNOWN_STRATEGIES]
        if unknown:
            raise ValueError(
                f"unknown strategies {unknown}; expected any of {list(KNOWN_STRATEGIES)}"
            )
        if len(set(v)) != len(v):
            raise ValueError("resolver.strategies must not contain duplicates")
        return v

    @field_validator("content_timeout_seconds", "probe_timeout_seconds")
    @classmethod
    def _validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("max_probes_per_strategy")
    @classmethod
    def _validate_max_probes(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_probes_per_strategy must be >= 1")
        return v

    @field_validator("allowed_video_codecs", "allowed_audio_codecs")
    @classmethod
    def _validate_codecs(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("codec lists must not be empty")
        return [c.strip().lower() for c in v]


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/resolver).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="trailarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP client (YAML section: http.*)
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether the shared HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="Trailarr/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="Default User-Agent; strategies send their own client UA.",
    )
    http_max_connections: int = Field(
        default=20,
        validation_alias=AliasChoices(
            "http_max_connections",
            AliasPath("http", "max_connections"),
        ),
        description="Connection pool size of the shared HTTP client.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Trailer resolution (YAML section: resolver.*)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @field_validator("http_max_connections")
    @classmethod
    def _validate_max_connections(cls, v: int) -> int:
        if v < 1:
            raise ValueError("http_max_connections must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
                "max_connections": self.http_max_connections,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "resolver": self.resolver.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read TRAILARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - TRAILARR_ENVIRONMENT
    - TRAILARR_LOG_LEVEL
    - TRAILARR_RESOLVER_STRATEGIES=watch_page,innertube_android
    - TRAILARR_RESOLVER_CONTENT_TIMEOUT_SECONDS
    """

    model_config = SettingsConfigDict(
        env_prefix="TRAILARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None
    http_max_connections: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    # Comma-separated lists, split in to_update_dict()
    resolver_strategies: Optional[str] = None
    resolver_allowed_video_codecs: Optional[str] = None
    resolver_allowed_audio_codecs: Optional[str] = None

    resolver_content_timeout_seconds: Optional[float] = None
    resolver_probe_timeout_seconds: Optional[float] = None
    resolver_max_probes_per_strategy: Optional[int] = None
    resolver_validate_streams: Optional[bool] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        data = self.model_dump(exclude_none=True)
        for key in (
            "resolver_strategies",
            "resolver_allowed_video_codecs",
            "resolver_allowed_audio_codecs",
        ):
            if key in data:
                data[key] = _split_csv(data[key])
        return data
