"""Application configuration settings.

This module provides the AppConfig class and the settings singleton.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hub_mcp.config.env_loader import Environment, get_environment, load_env_files
from hub_mcp.config.validators import (
    resolve_path,
    validate_flow_prefix,
    validate_log_format,
    validate_log_level,
    validate_store_backend,
)
from hub_mcp.telemetry import get_logger

log = get_logger(__name__)


class ConfigError(ValueError):
    """Raised when settings are individually valid but cannot be used together."""


class AppConfig(BaseSettings):
    """Unified application configuration.

    Values come from environment variables (``HUB_MCP_`` prefix), .env files
    loaded by :func:`load_env_files`, and the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="HUB_MCP_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )
    debug: bool = Field(default=False, alias="APP_DEBUG", description="Debug mode flag")

    # Application
    project_name: str = Field(default="Hub MCP Server", description="Project name")
    version: str = Field(default="0.1.0", description="Application version")

    # Telemetry
    log_dir: Path | None = Field(
        default=None, description="Directory for JSONL log files (unset = console only)"
    )
    log_level: str = Field(
        default="INFO",
        alias="APP_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="console", alias="APP_LOG_FORMAT", description="Log format (json or console)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_dir", "rules_file", mode="before")
    @classmethod
    def resolve_paths(cls, v: Path | str | None) -> Path | None:
        """Resolve relative paths to absolute."""
        return resolve_path(v)

    # HTTP service
    service_host: str = Field(default="0.0.0.0", description="Bind address for the MCP endpoint")
    service_port: int = Field(default=3000, ge=1, le=65535, description="MCP endpoint port")

    # Protocol identity
    protocol_version: str = Field(
        default="2025-06-18", description="MCP protocol version reported by initialize"
    )
    server_name: str = Field(default="hub-mcp-server", description="Server name for initialize")
    server_version: str = Field(default="0.1.0", description="Server version for initialize")

    # Flow discovery
    flow_name_prefix: str = Field(
        default="mcp_", description="Prefix marking AI-callable flow names (naming convention)"
    )
    marker_app_id: str = Field(
        default="nl.joonix.aichatcontrol",
        description="App id used in the fully-qualified marker trigger id",
    )
    discovery_cache_ttl_seconds: float = Field(
        default=0.0,
        ge=0,
        le=300,
        description=(
            "Reuse the last discovery result for this many seconds. "
            "0 disables caching so every tools/list re-scans the rule store."
        ),
    )

    @field_validator("flow_name_prefix")
    @classmethod
    def validate_flow_prefix(cls, v: str) -> str:
        """Validate flow-name prefix."""
        return validate_flow_prefix(v)

    # Rule store
    rule_store_backend: str = Field(
        default="memory", description="Rule store backend: memory, file, or http"
    )
    rules_file: Path | None = Field(
        default=None, description="YAML file with rules for the 'file' backend"
    )
    hub_base_url: str = Field(
        default="http://localhost", description="Base URL of the hub web API ('http' backend)"
    )
    hub_api_token: str | None = Field(default=None, description="Bearer token for the hub API")
    hub_trigger_url: str | None = Field(
        default=None,
        description="Endpoint that fires the marker trigger with a token set ('http' backend)",
    )
    hub_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for hub API requests"
    )

    @field_validator("rule_store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Validate rule store backend."""
        return validate_store_backend(v)

    @property
    def marker_trigger_full_id(self) -> str:
        """Fully-qualified marker trigger id for the configured app."""
        return f"homey:app:{self.marker_app_id}:ai_tool_call"


_settings: AppConfig | None = None


def load_app_config() -> AppConfig:
    """Load and validate application configuration.

    This function:
    1. Loads .env files in priority order (via env_loader)
    2. Creates AppConfig instance (reads from environment variables)
    3. Validates all values using Pydantic

    Returns:
        Validated AppConfig instance.

    Raises:
        ValidationError: If configuration validation fails.
    """
    log.debug("loading_app_config", environment=get_environment().value)

    load_env_files()

    try:
        config = AppConfig()
        log.info(
            "app_config_loaded",
            environment=config.environment.value,
            debug=config.debug,
            rule_store_backend=config.rule_store_backend,
            log_level=config.log_level,
        )
        return config
    except Exception as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise


def get_settings() -> AppConfig:
    """Get the application settings singleton.

    Returns:
        AppConfig instance (loaded on first use).
    """
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next :func:`get_settings` reloads them."""
    global _settings
    _settings = None
