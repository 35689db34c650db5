"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
ExternalPlayerName = Literal["infuse", "vidhub", "outplayer"]
LaunchMode = Literal["system", "client"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class AddonsConfig(BaseModel):
    """Addon registry and stream aggregation settings (YAML section: addons.*)."""

    default_urls: list[str] = Field(
        default_factory=lambda: ["https://v3-cinemeta.strem.io/manifest.json"],
        description="Addons registered at startup when the store is empty.",
    )
    fallback_stream_addon_url: str | None = Field(
        default="https://torrentio.strem.fun/manifest.json",
        description="Torrent-indexing addon auto-registered for stream searches.",
    )
    canonical_hosts: list[str] = Field(
        default_factory=lambda: ["torrentio"],
        description=(
            "Base-URL substrings of addons that always use the canonical "
            "/stream/{type}/{id}.json path (no alternate paths are tried)."
        ),
    )
    stream_timeout_seconds: float = Field(
        default=8.0,
        description="Deadline for each stream path request to one addon.",
    )
    catalog_page_size: int = Field(
        default=100,
        description="Default 'limit' query parameter for catalog requests.",
    )
    breaker_failure_threshold: int = Field(
        default=5,
        description="Consecutive failures before an addon is skipped.",
    )
    breaker_cooldown_seconds: float = Field(
        default=120.0,
        description="How long a failing addon is skipped before a trial search is let through.",
    )

    @field_validator("stream_timeout_seconds")
    @classmethod
    def _validate_stream_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("stream_timeout_seconds must be > 0")
        return v


class DebridConfig(BaseModel):
    """Debrid provider credentials and request settings (YAML section: debrid.*)."""

    real_debrid_api_key: SecretStr | None = None
    all_debrid_api_key: SecretStr | None = None
    premiumize_api_key: SecretStr | None = None

    agent: str = Field(
        default="addonarr",
        description="Agent name sent to All-Debrid.",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for debrid API calls.",
    )


class PlayerConfig(BaseModel):
    """Playback hand-off settings (YAML section: player.*)."""

    external_enabled: bool = Field(
        default=False,
        description="Hand resolved streams to an external player app.",
    )
    external_player: ExternalPlayerName = Field(
        default="infuse",
        description="Primary external player.",
    )
    fallback_player: Optional[ExternalPlayerName] = Field(
        default=None,
        description="Player tried when the primary cannot play or launch.",
    )
    fallback_delay_seconds: float = Field(
        default=2.0,
        description="Delay before the fallback player is offered after a launch.",
    )
    success_callback: str = Field(
        default="addonarr://",
        description="x-success callback URL passed to players that support it.",
    )
    launch_mode: LaunchMode = Field(
        default="client",
        description=(
            "'system' opens player URLs on this host; 'client' only returns "
            "them for the API caller to open."
        ),
    )

    @model_validator(mode="after")
    def _fallback_differs(self) -> "PlayerConfig":
        if self.fallback_player == self.external_player:
            self.fallback_player = None
        return self


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/storage/addons/debrid/player).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="addonarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=8.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request HTTP timeout for addon endpoints.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="Addonarr/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
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

    # Storage (YAML section: storage.*)
    storage_dir: Path = Field(
        default=Path("./.cache/addonarr"),
        validation_alias=AliasChoices(
            "storage_dir",
            AliasPath("storage", "dir"),
        ),
        description="Directory of the persisted addon registry.",
    )

    addons: AddonsConfig = Field(default_factory=AddonsConfig)
    debrid: DebridConfig = Field(default_factory=DebridConfig)
    player: PlayerConfig = Field(default_factory=PlayerConfig)

    @field_validator("storage_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
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

        Secrets are masked.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "storage": {"dir": str(self.storage_dir)},
            "addons": self.addons.model_dump(),
            "debrid": self.debrid.model_dump(mode="json"),
            "player": self.player.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read ADDONARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - ADDONARR_HTTP_TIMEOUT_SECONDS
    - ADDONARR_LOG_LEVEL
    - ADDONARR_STORAGE_DIR
    - ADDONARR_REAL_DEBRID_API_KEY
    - ADDONARR_EXTERNAL_PLAYER
    """

    model_config = SettingsConfigDict(
        env_prefix="ADDONARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    storage_dir: Optional[Path] = None

    real_debrid_api_key: Optional[str] = None
    all_debrid_api_key: Optional[str] = None
    premiumize_api_key: Optional[str] = None

    external_enabled: Optional[bool] = None
    external_player: Optional[ExternalPlayerName] = None
    fallback_player: Optional[ExternalPlayerName] = None

    @field_validator("storage_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
