"""
Shared configuration management for the Permify access layer.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Every field can be overridden with a ``PERMIFY_``-prefixed environment
    variable, e.g. ``PERMIFY_BASE_URL`` or ``PERMIFY_SKIP_HEALTH_CHECK``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PERMIFY_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Permify
    base_url: str = Field(default="http://localhost:3476")
    api_key: Optional[str] = Field(default=None)
    request_timeout: float = Field(default=10.0)

    # Startup health check
    skip_health_check: bool = Field(default=False)
    health_check_timeout: float = Field(default=5.0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
