"""Custom Pydantic validators for configuration."""

from pathlib import Path

RULE_STORE_BACKENDS = frozenset({"memory", "file", "http"})


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    Args:
        value: Log level string.

    Returns:
        Validated, uppercased log level.

    Raises:
        ValueError: If log level is not valid.
    """
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if value.upper() not in valid_levels:
        raise ValueError(f"log_level must be one of {valid_levels}, got {value}")
    return value.upper()


def validate_log_format(value: str) -> str:
    """Validate log format is 'json' or 'console'.

    Raises:
        ValueError: If log format is not valid.
    """
    valid_formats = {"json", "console"}
    if value.lower() not in valid_formats:
        raise ValueError(f"log_format must be one of {valid_formats}, got {value}")
    return value.lower()


def validate_store_backend(value: str) -> str:
    """Validate the rule store backend name.

    Raises:
        ValueError: If the backend is unknown.
    """
    normalized = value.strip().lower()
    if normalized not in RULE_STORE_BACKENDS:
        raise ValueError(
            f"rule_store_backend must be one of {sorted(RULE_STORE_BACKENDS)}, got {value}"
        )
    return normalized


def validate_flow_prefix(value: str) -> str:
    """Validate the flow-name prefix used by the naming convention.

    The prefix must be non-empty and lowercase so that tool names derived
    from it round-trip.

    Raises:
        ValueError: If the prefix is empty or contains whitespace.
    """
    if not value or any(ch.isspace() for ch in value):
        raise ValueError(f"flow_name_prefix must be a non-empty token, got {value!r}")
    return value.lower()


def resolve_path(value: Path | str | None) -> Path | None:
    """Resolve a configured path to an absolute one.

    Args:
        value: Path value (string, Path, or None).

    Returns:
        Resolved Path, or None when no path was given.
    """
    if value is None or value == "":
        return None

    path = Path(value).expanduser() if isinstance(value, str) else value.expanduser()

    # Relative paths are taken from the working directory the server starts in
    return path.resolve()
