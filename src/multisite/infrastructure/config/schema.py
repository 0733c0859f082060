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


class RegistryConfig(BaseModel):
    """Remote site list and its cache."""

    source_url: str = Field(
        default="https://pastebin.com/raw/KgQ4jTy6",
        description="Plain-text resource with one site URL per line.",
    )
    ttl_hours: float = Field(
        default=24.0,
        description="How long a fetched site list is considered fresh.",
    )
    retry_seconds: float = Field(
        default=300.0,
        description="After a failed refresh, serve the stale list this long before retrying.",
    )
    denylist: list[str] = Field(
        default_factory=lambda: ["1337x.to", "ilcorsaronero"],
        description="Substrings excluding a site from the list (env: comma-separated).",
    )
    language: str = Field(default="it", description="Language tag of listed sites.")

    @field_validator("denylist", mode="before")
    @classmethod
    def _split_denylist(cls, v: Any) -> Any:
        # "1337x.to, ilcorsaronero" from env / CLI; "" clears the list
        if isinstance(v, str):
            return [token.strip() for token in v.split(",") if token.strip()]
        return v

    @field_validator("ttl_hours", "retry_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_hours * 3600


class ScrapingConfig(BaseModel):
    """Listing heuristics and cross-site fan-out."""

    min_plausible_items: int = Field(
        default=3,
        description="Minimum nodes a selector must match to count as the listing.",
    )
    max_concurrent_sites: int = Field(
        default=3,
        description="Max sites queried in parallel by a cross-site search.",
    )
    site_timeout_seconds: float = Field(
        default=30.0,
        description="Per-site timeout for cross-site operations.",
    )

    @field_validator("min_plausible_items", "max_concurrent_sites")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v


class ResolverConfig(BaseModel):
    """Short-link resolvers."""

    max_redirect_attempts: int = Field(
        default=5,
        description="Hop cap for redirect-chain resolvers.",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for resolvers and the generic extractor.",
    )

    @field_validator("max_redirect_attempts")
    @classmethod
    def _validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_redirect_attempts must be >= 1")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/registry/scraping/resolvers/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="multisite", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Page fetch timeout in seconds.",
    )
    http_user_agent: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for page fetches. Unset uses a desktop Chrome UA.",
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

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    scraping: ScrapingConfig = Field(default_factory=ScrapingConfig)
    resolvers: ResolverConfig = Field(default_factory=ResolverConfig)

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
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "registry": self.registry.model_dump(),
            "scraping": self.scraping.model_dump(),
            "resolvers": self.resolvers.model_dump(),
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read MULTISITE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - MULTISITE_HTTP_TIMEOUT_SECONDS
    - MULTISITE_REGISTRY_SOURCE_URL
    - MULTISITE_REGISTRY_DENYLIST (comma-separated)
    - MULTISITE_SCRAPING_MIN_PLAUSIBLE_ITEMS
    - MULTISITE_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="MULTISITE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    registry_source_url: Optional[str] = None
    registry_ttl_hours: Optional[float] = None
    registry_retry_seconds: Optional[float] = None
    # Kept as the raw comma-separated string; RegistryConfig splits it.
    registry_denylist: Optional[str] = None
    registry_language: Optional[str] = None

    scraping_min_plausible_items: Optional[int] = None
    scraping_max_concurrent_sites: Optional[int] = None
    scraping_site_timeout_seconds: Optional[float] = None

    resolvers_max_redirect_attempts: Optional[int] = None
    resolvers_timeout_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
