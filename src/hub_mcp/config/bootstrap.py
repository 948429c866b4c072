"""Bootstrap configuration helpers (pre-settings).

Logging has to be configured before the Pydantic settings singleton can be
imported (settings loading itself logs), so the handful of logging options
are read straight from the environment here.

Constraints:
- Keep this module dependency-light (no telemetry imports) to avoid circular imports.
- Validate values with the shared config validators.
"""

from __future__ import annotations

import os
from pathlib import Path

from hub_mcp.config.validators import validate_log_format, validate_log_level


def get_bootstrap_log_level(default: str = "INFO") -> str:
    """Get logging level from environment without importing settings.

    Args:
        default: Default log level if not set or invalid.

    Returns:
        Uppercased, validated log level string.
    """
    value = os.getenv("APP_LOG_LEVEL", default)
    try:
        return validate_log_level(value)
    except ValueError:
        return validate_log_level(default)


def get_bootstrap_log_format(default: str = "console") -> str:
    """Get console log format (``json`` or ``console``) from the environment."""
    value = os.getenv("APP_LOG_FORMAT", default)
    try:
        return validate_log_format(value)
    except ValueError:
        return validate_log_format(default)


def get_bootstrap_log_dir() -> Path | None:
    """Get the JSONL log directory, or None when file logging is disabled."""
    value = os.getenv("HUB_MCP_LOG_DIR", "").strip()
    if not value:
        return None
    return Path(value).expanduser()
