"""
Shared configuration management for the JWT access layer.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # JWKS discovery
    jwks_timeout_seconds: float = Field(default=5.0)
    jwks_cache_ttl_seconds: float = Field(default=0.0, ge=0)
    jwks_cache_max_entries: int = Field(default=1024, ge=1)
    allowed_issuers: List[str] = Field(default_factory=list)

    # Issuing
    service_kid: str = Field(default="service-key")
    service_issuer: str = Field(default="localhost")
    default_expiry_seconds: int = Field(default=3600)
    private_jwk_file: Optional[str] = Field(default=None)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
