"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (FEDSEARCH_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, YamlConfigSettingsSource

from fedsearch.models.query import DEFAULT_FIELDS, DEFAULT_USER_AGENT, UnsupportedContentPolicy


def _parse_str_list(v: Any) -> list[str]:
    """Parse a list from a JSON string, a comma-separated string, or a sequence."""
    if v is None:
        return []
    if isinstance(v, str):
        import json

        try:
            parsed = json.loads(v)
            if isinstance(parsed, list):
                return [str(item) for item in parsed]
        except (json.JSONDecodeError, TypeError):
            pass
        return [item.strip() for item in v.split(",") if item.strip()]
    return [str(item) for item in v]


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")
    allow_url_override: bool = Field(
        default=False,
        description="Let API callers query URLs outside federation.urls",
    )


class FederationSettings(BaseModel):
    """Sources and fetch behavior of the federated search."""

    urls: list[str] = Field(default_factory=list, description="Source URLs, queried as-is")
    timeout: float | None = Field(default=None, gt=0, description="Per-request timeout in seconds")
    fields: list[str] = Field(default_factory=lambda: list(DEFAULT_FIELDS), description="Fields read off XML entries")
    max_workers: int | None = Field(default=None, ge=1, description="Max concurrent requests (None = CPU count)")
    unsupported_content: UnsupportedContentPolicy = Field(
        default="strict",
        description="strict: fail on unknown content types; lenient: skip the source",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header for outbound requests")

    @field_validator("urls", mode="before")
    @classmethod
    def _parse_urls(cls, v: Any) -> list[str]:
        """Parse URLs from a JSON string or comma-separated string (env var) or list."""
        return _parse_str_list(v)

    @field_validator("fields", mode="before")
    @classmethod
    def _parse_fields(cls, v: Any) -> list[str]:
        return _parse_str_list(v) or list(DEFAULT_FIELDS)


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the FEDSEARCH_ prefix.
    Nested settings use double underscores: FEDSEARCH_FEDERATION__TIMEOUT=10

    Example:
        FEDSEARCH_FEDERATION__URLS='["http://a.example/search?q=foo"]'
        FEDSEARCH_FEDERATION__UNSUPPORTED_CONTENT=lenient
        FEDSEARCH_SERVER__PORT=9090
    """

    model_config = {
        "env_prefix": "FEDSEARCH_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    app_name: str = Field(default="fedsearch", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    server: ServerSettings = Field(default_factory=ServerSettings)
    federation: FederationSettings = Field(default_factory=FederationSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Rank sources: init kwargs, env, .env, then the YAML file (if any)."""
        sources = [init_settings, env_settings, dotenv_settings]
        if settings_cls.model_config.get("yaml_file"):
            sources.append(YamlConfigSettingsSource(settings_cls))
        sources.append(file_secret_settings)
        return tuple(sources)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are used as defaults; environment variables
        still take precedence.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        yaml_settings = type(
            cls.__name__,
            (cls,),
            {"model_config": {**cls.model_config, "yaml_file": config_path, "yaml_file_encoding": "utf-8"}},
        )
        return yaml_settings()
