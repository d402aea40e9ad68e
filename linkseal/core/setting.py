"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- The salt has no usable default: the HTTP layer refuses to sign until
  URL_SALT is set
- Settings are only read by the HTTP layer; services receive explicit
  option objects built from them
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from linkseal.core.options import (
    DEFAULT_HASH_PARAMETER,
    DEFAULT_TIME_PARAMETER,
    ExpiryOptions,
    SignatureScheme,
    SignerOptions,
)

__all__ = ["Settings", "settings", "get_settings"]


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )

    # Signing Configuration
    URL_SALT: str = Field(
        default="",
        description="Secret salt used to sign URLs (required for signing)"
    )
    HASH_PARAMETER: str = Field(
        default=DEFAULT_HASH_PARAMETER,
        description="Query string parameter that carries the signature"
    )
    SIGNATURE_SCHEME: SignatureScheme = Field(
        default=SignatureScheme.legacy_sha1,
        description="Digest construction (legacy-sha1 or hmac-sha256)"
    )
    SORT_QUERY_PARAMETERS: bool = Field(
        default=False,
        description="Sort query parameters by name before hashing"
    )

    # Expiry Configuration
    TIME_PARAMETER: str = Field(
        default=DEFAULT_TIME_PARAMETER,
        description="Query string parameter that carries the issue time"
    )
    DEFAULT_VALID_FOR_SECONDS: int = Field(
        default=86400,
        ge=0,
        description="Validity window used when a check request does not give one"
    )

    def signer_options(self) -> SignerOptions:
        """Build the signer configuration from these settings."""
        return SignerOptions(
            salt=self.URL_SALT,
            hash_parameter=self.HASH_PARAMETER,
            scheme=self.SIGNATURE_SCHEME,
            sort_parameters=self.SORT_QUERY_PARAMETERS,
        )

    def expiry_options(self) -> ExpiryOptions:
        """Build the expirer configuration from these settings."""
        return ExpiryOptions(time_parameter=self.TIME_PARAMETER)


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process settings (overridable in tests)."""
    return settings
