"""Configuration management for the hub MCP server.

Settings are read from environment variables (``HUB_MCP_`` prefix), optional
.env files, and defaults, and validated with Pydantic.
"""

from hub_mcp.config.env_loader import Environment, get_environment
from hub_mcp.config.settings import (
    AppConfig,
    ConfigError,
    get_settings,
    load_app_config,
    reset_settings,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "Environment",
    "get_environment",
    "get_settings",
    "load_app_config",
    "reset_settings",
]
