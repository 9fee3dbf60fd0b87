"""
Configuration management for the discovery client.

This module provides the client configuration surface:
- Request and connect timeouts with defaults
- TLS settings that switch requests to https
- Logging level and format
- YAML files and environment variable overrides
"""

import ssl
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError

DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_ENV_PREFIX = "DISCOVERY_CLIENT_"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TLSConfig(BaseModel):
    """TLS configuration for outbound connections."""

    model_config = {"frozen": True}

    ca_cert_path: str | None = Field(default=None, description="CA bundle path")
    client_cert_path: str | None = Field(
        default=None, description="Client certificate for mutual TLS"
    )
    client_key_path: str | None = Field(
        default=None, description="Client private key for mutual TLS"
    )
    verify: bool = Field(default=True, description="Verify server certificates")

    def create_ssl_context(self) -> ssl.SSLContext:
        """Build an SSL context from this configuration."""
        try:
            context = ssl.create_default_context(cafile=self.ca_cert_path)
            if self.client_cert_path:
                context.load_cert_chain(self.client_cert_path, self.client_key_path)
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(f"Invalid TLS configuration: {e}")

        if not self.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context


class ClientConfig(BaseSettings):
    """Discovery client configuration, immutable once built."""

    model_config = SettingsConfigDict(
        env_prefix=DEFAULT_ENV_PREFIX,
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    timeout: float = Field(
        default=DEFAULT_TIMEOUT, description="Overall request timeout in seconds"
    )
    connect_timeout: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT, description="Connect timeout in seconds"
    )
    tls: TLSConfig | None = Field(
        default=None, description="TLS settings, enables https when present"
    )
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: str = Field(default="json", description="Log format (json|console)")
    user_agent: str | None = Field(
        default=None, description="User-Agent sent when the caller sets none"
    )

    @field_validator("timeout")
    @classmethod
    def _default_timeout(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_TIMEOUT

    @field_validator("connect_timeout")
    @classmethod
    def _default_connect_timeout(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_CONNECT_TIMEOUT

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"json", "console"}:
            raise ValueError(f"Invalid log format '{value}'. Choose json or console.")
        return lowered

    @property
    def tls_enabled(self) -> bool:
        return self.tls is not None

    @property
    def scheme(self) -> str:
        """URL scheme for outbound requests."""
        return "https" if self.tls_enabled else "http"

    @classmethod
    def from_yaml(cls, file_path: str | Path) -> "ClientConfig":
        """Load configuration from YAML file."""
        try:
            with open(file_path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {file_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration: {e}")
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

    @classmethod
    def from_env(cls, env_prefix: str = DEFAULT_ENV_PREFIX) -> "ClientConfig":
        """Load configuration from environment variables."""
        try:
            return cls(_env_prefix=env_prefix)
        except ValidationError as e:
            raise ConfigurationError(
                f"Environment configuration validation failed: {e}"
            )


def load_config(
    yaml_file: str | Path | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> ClientConfig:
    """
    Load configuration.

    Priority order:
    1. YAML file (if provided and present)
    2. Environment variables
    3. Defaults
    """
    if yaml_file and Path(yaml_file).exists():
        return ClientConfig.from_yaml(yaml_file)
    return ClientConfig.from_env(env_prefix)


__all__ = [
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "LogLevel",
    "TLSConfig",
    "load_config",
]
