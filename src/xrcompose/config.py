"""Configuration for xrcompose."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthMode(str, Enum):
    """How to authenticate to the Kubernetes API server."""

    AUTO = "auto"
    KUBECONFIG = "kubeconfig"
    IN_CLUSTER = "in_cluster"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class XRComposeConfig(BaseSettings):
    """Configuration for the composer and its object store client.

    Loaded from environment variables with XRCOMPOSE_ prefix
    or from a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="XRCOMPOSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    auth_mode: AuthMode = Field(
        default=AuthMode.AUTO,
        description="Authentication mode: auto tries in-cluster first, then kubeconfig",
    )
    kubeconfig_path: Path | None = Field(
        default=None,
        description="Path to kubeconfig file (defaults to the client library's lookup)",
    )
    kubeconfig_context: str | None = Field(
        default=None,
        description="Kubeconfig context to use",
    )
    field_manager: str = Field(
        default="xrcompose",
        description="Field manager name sent with every write",
    )
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )


@lru_cache
def get_config() -> XRComposeConfig:
    """Get the process-wide configuration, loading it on first use."""
    return XRComposeConfig()
