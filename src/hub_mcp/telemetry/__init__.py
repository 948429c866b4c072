"""Telemetry module for structured logging and trace correlation.

This module provides:
- Structured logging via structlog
- TraceContext for per-request correlation
- Semantic event constants
"""

from hub_mcp.telemetry.events import (
    FLOW_COMMAND_REGISTERED,
    FLOW_DISCOVERY_CACHE_HIT,
    FLOW_DISCOVERY_COMPLETED,
    FLOW_DISCOVERY_FAILED,
    FLOW_DISCOVERY_STARTED,
    FLOW_RULE_SKIPPED,
    FLOW_TOOLS_COMPILED,
    FLOW_TRIGGER_FAILED,
    FLOW_TRIGGER_STARTED,
    FLOW_TRIGGERED,
    MCP_CLIENT_INITIALIZED,
    MCP_ERROR_SENT,
    MCP_INTERNAL_ERROR,
    MCP_REQUEST_RECEIVED,
    MCP_RESPONSE_SENT,
    PARAMETER_LINE_PARSED,
    PARAMETER_ORDER_CACHED,
    RULE_STORE_LOADED,
    RULE_STORE_REQUEST_FAILED,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    TOKEN_ORDER_FALLBACK,
    TOKEN_SLOTS_OVERFLOW,
    TOOL_CALL_COMPLETED,
    TOOL_CALL_FAILED,
    TOOL_CALL_STARTED,
    TOOL_NAME_CONFLICT,
    TOOL_REGISTERED,
)
from hub_mcp.telemetry.logger import configure_logging, get_logger
from hub_mcp.telemetry.trace import TraceContext

__all__ = [
    # Core exports
    "TraceContext",
    "get_logger",
    "configure_logging",
    # Event constants
    "SERVICE_STARTING",
    "SERVICE_READY",
    "SERVICE_STOPPED",
    "MCP_REQUEST_RECEIVED",
    "MCP_RESPONSE_SENT",
    "MCP_ERROR_SENT",
    "MCP_CLIENT_INITIALIZED",
    "MCP_INTERNAL_ERROR",
    "TOOL_REGISTERED",
    "TOOL_CALL_STARTED",
    "TOOL_CALL_COMPLETED",
    "TOOL_CALL_FAILED",
    "TOOL_NAME_CONFLICT",
    "FLOW_DISCOVERY_STARTED",
    "FLOW_DISCOVERY_COMPLETED",
    "FLOW_DISCOVERY_FAILED",
    "FLOW_DISCOVERY_CACHE_HIT",
    "FLOW_RULE_SKIPPED",
    "FLOW_TOOLS_COMPILED",
    "PARAMETER_ORDER_CACHED",
    "PARAMETER_LINE_PARSED",
    "FLOW_COMMAND_REGISTERED",
    "FLOW_TRIGGER_STARTED",
    "FLOW_TRIGGERED",
    "FLOW_TRIGGER_FAILED",
    "TOKEN_ORDER_FALLBACK",
    "TOKEN_SLOTS_OVERFLOW",
    "RULE_STORE_REQUEST_FAILED",
    "RULE_STORE_LOADED",
]
