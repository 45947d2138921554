"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- No credentials in code (the auth token only ever comes from the environment)
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from history_sync.domain.models import FilterSelection, SortSelection

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://zorgm-api-q7ppsor5da-uc.a.run.app/api/v1"


class APIConfig(BaseModel):
    """Backend connection settings."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Backend API base URL")
    timeout_seconds: float = Field(default=15.0, gt=0.0, description="Per-request timeout")
    retry_attempts: int = Field(
        default=2, ge=0, le=5, description="Extra attempts on transport failures"
    )
    aggregate: bool = Field(default=True, description="Ask the backend for aggregated submissions")
    auth_token: str | None = Field(default=None, description="Bearer token (optional)")

    @field_validator("base_url")
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


class HistoryConfig(BaseModel):
    """History screen behaviour."""

    default_sort: SortSelection = Field(default=SortSelection.NEWEST_FIRST)
    default_filter: FilterSelection = Field(default=FilterSelection.ALL)
    fallback_enabled: bool = Field(
        default=True, description="Publish a synthetic dataset when a fetch fails"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    api: APIConfig = Field(default_factory=APIConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _parse_bool(val: str | None, default: bool) -> bool:
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "on"}

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    api_config = APIConfig(
        base_url=os.getenv("HISTORY_API_BASE_URL", DEFAULT_BASE_URL),
        timeout_seconds=float(os.getenv("HISTORY_API_TIMEOUT_SECONDS", "15.0")),
        retry_attempts=int(os.getenv("HISTORY_API_RETRY_ATTEMPTS", "2")),
        aggregate=_parse_bool(os.getenv("HISTORY_API_AGGREGATE"), True),
        auth_token=os.getenv("HISTORY_AUTH_TOKEN") or None,
    )

    history_config = HistoryConfig(
        default_sort=SortSelection(os.getenv("HISTORY_DEFAULT_SORT", "newest_first")),
        default_filter=FilterSelection(os.getenv("HISTORY_DEFAULT_FILTER", "all")),
        fallback_enabled=_parse_bool(os.getenv("HISTORY_FALLBACK_ENABLED"), True),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        api=api_config,
        history=history_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()
