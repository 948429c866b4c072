"""Environment variable file loader with priority-based loading."""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from hub_mcp.telemetry import get_logger

log = get_logger(__name__)


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


def get_environment() -> Environment:
    """Detect current environment from the APP_ENV environment variable.

    Mapping:
    - "production" or "prod" -> Environment.PRODUCTION
    - "staging" or "stage" -> Environment.STAGING
    - "test" -> Environment.TEST
    - anything else -> Environment.DEVELOPMENT

    Note: environment detection happens before settings are loaded, so this
    is the one place that reads os.environ directly.
    """
    app_env = os.getenv("APP_ENV", "").lower()

    if app_env in ("production", "prod"):
        return Environment.PRODUCTION
    elif app_env in ("staging", "stage"):
        return Environment.STAGING
    elif app_env == "test":
        return Environment.TEST
    else:
        return Environment.DEVELOPMENT


def load_env_files(base_dir: Path | None = None) -> list[str]:
    """Load .env files in priority order.

    Priority order (highest to lowest):
    1. `.env.{environment}.local`
    2. `.env.{environment}`
    3. `.env.local`
    4. `.env`

    Explicit environment variables always win over values from files.

    Args:
        base_dir: Directory holding the .env files. Defaults to the working directory.

    Returns:
        Names of the files that were loaded.
    """
    if base_dir is None:
        base_dir = Path.cwd()

    env_name = get_environment().value

    env_files = [
        base_dir / ".env",
        base_dir / ".env.local",
        base_dir / f".env.{env_name}",
        base_dir / f".env.{env_name}.local",
    ]

    loaded_files = []
    # Highest priority first: with override=False the first value loaded sticks
    for env_file in reversed(env_files):
        if env_file.exists():
            load_dotenv(env_file, override=False)
            loaded_files.append(env_file.name)

    if loaded_files:
        log.info("env_files_loaded", environment=env_name, files=loaded_files)
    else:
        log.debug("no_env_files_found", environment=env_name, base_dir=str(base_dir))

    return loaded_files
