"""
Shared configuration management for the ReqRes Access Layer.
"""

from typing import Any, Optional

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


class ReqResSettings(BaseSettings):
    """Connection settings for the remote ReqRes user directory.

    Read from ``REQRES_BASE_URL``, ``REQRES_TIMEOUT_SECONDS``,
    ``REQRES_API_KEY`` and friends. ``base_url`` has no default: a service
    must not start without one.
    """

    model_config = SettingsConfigDict(
        env_prefix="REQRES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    base_url: AnyHttpUrl
    timeout_seconds: float = Field(default=10.0, gt=0)
    api_key: Optional[str] = None

    # Transport retry policy
    retry_attempts: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=2.0, ge=0)

    # Response cache
    cache_ttl_seconds: int = Field(default=300, gt=0)
    cache_max_entries: int = Field(default=1024, gt=0)

    @field_validator("api_key")
    @classmethod
    def blank_api_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty key means no header is sent."""
        if v is not None and not v.strip():
            return None
        return v


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)


def get_reqres_settings(**overrides: Any) -> ReqResSettings:
    """Load ReqRes settings, failing fast when they are missing or invalid."""
    try:
        return ReqResSettings(**overrides)
    except ValidationError as exc:
        fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        raise ConfigurationError(
            f"ReqRes settings are invalid: {', '.join(fields)}",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)}
        ) from exc
