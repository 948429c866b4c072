"""Structured logging configuration using structlog.

Console output is pretty-printed (or JSON when ``log_format`` is ``json``),
and an optional rotating JSONL file keeps INFO+ events for later inspection.
"""

import logging
import logging.handlers
import pathlib
import sys
from datetime import datetime, timezone
from typing import Any

import structlog


def _get_log_level() -> str:
    """Get log level without importing the settings singleton.

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    # Settings import telemetry, so the level is bootstrapped from the environment.
    from hub_mcp.config.bootstrap import get_bootstrap_log_level  # noqa: PLC0415

    return get_bootstrap_log_level()


def _get_log_options() -> tuple[str, pathlib.Path | None]:
    """Resolve log format and file directory from the environment.

    Returns:
        Tuple of (log format, log directory or None when file logging is off).
    """
    from hub_mcp.config.bootstrap import (  # noqa: PLC0415
        get_bootstrap_log_dir,
        get_bootstrap_log_format,
    )

    return get_bootstrap_log_format(), get_bootstrap_log_dir()


def _add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add UTC timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_component(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add component name (last part of the dotted logger name) to log event.

    Works for both foreign stdlib records and structlog events, since
    ``add_logger_name`` has already put the name into the event dict.

    Args:
        logger: The logger instance.
        method_name: The log method name (info, error, etc.).
        event_dict: The event dictionary.

    Returns:
        Event dictionary with component added.
    """
    logger_name = event_dict.get("logger") or getattr(logger, "name", "") or ""
    event_dict["component"] = logger_name.rsplit(".", 1)[-1] if logger_name else "unknown"
    return event_dict


_FOREIGN_PRE_CHAIN = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    _add_timestamp,
    _add_component,
]


def _configure_file_handler(log_dir: pathlib.Path) -> logging.handlers.RotatingFileHandler:
    """Configure rotating file handler for JSON logs.

    Args:
        log_dir: Directory for log files.

    Returns:
        Configured RotatingFileHandler.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_dir / "hub_mcp.jsonl"),
        maxBytes=20 * 1024 * 1024,  # 20 MB
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_FOREIGN_PRE_CHAIN,  # type: ignore[arg-type]
        )
    )
    return handler


def _configure_console_handler(log_format: str) -> logging.StreamHandler[Any]:
    """Configure console handler.

    Args:
        log_format: ``json`` for machine-readable lines, ``console`` for pretty output.

    Returns:
        Configured StreamHandler writing to stderr.
    """
    handler = logging.StreamHandler(sys.stderr)

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_FOREIGN_PRE_CHAIN,  # type: ignore[arg-type]
        )
    )
    return handler


def configure_logging() -> None:
    """Configure structlog for structured logging.

    Called lazily by :func:`get_logger`; safe to call again to pick up a new
    level or format.
    """
    log_level = _get_log_level()
    log_format, log_dir = _get_log_options()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # Silence noisy third-party loggers.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    configured_level = getattr(logging, log_level, logging.INFO)

    console_handler = _configure_console_handler(log_format)
    console_handler.setLevel(configured_level)
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        # File handler captures INFO+ regardless of the console level
        file_handler = _configure_file_handler(log_dir)
        file_handler.setLevel(min(logging.INFO, configured_level))
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            _add_component,  # type: ignore[list-item]
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger instance.

    Example:
        >>> from hub_mcp.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("flow_triggered", command="radio_on", trace_id="abc")
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)
