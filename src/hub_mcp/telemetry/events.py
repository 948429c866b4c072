"""Semantic event constants for structured logging.

All log events should use these constants rather than magic strings to ensure
consistency and enable reliable querying of the JSONL logs.
"""

# Service lifecycle
SERVICE_STARTING = "service_starting"
SERVICE_READY = "service_ready"
SERVICE_STOPPED = "service_stopped"

# JSON-RPC protocol events
MCP_REQUEST_RECEIVED = "mcp_request_received"
MCP_RESPONSE_SENT = "mcp_response_sent"
MCP_ERROR_SENT = "mcp_error_sent"
MCP_CLIENT_INITIALIZED = "mcp_client_initialized"
MCP_INTERNAL_ERROR = "mcp_internal_error"

# Tool registry events
TOOL_REGISTERED = "tool_registered"
TOOL_CALL_STARTED = "tool_call_started"
TOOL_CALL_COMPLETED = "tool_call_completed"
TOOL_CALL_FAILED = "tool_call_failed"
TOOL_NAME_CONFLICT = "tool_name_conflict"

# Flow discovery and compilation
FLOW_DISCOVERY_STARTED = "flow_discovery_started"
FLOW_DISCOVERY_COMPLETED = "flow_discovery_completed"
FLOW_DISCOVERY_FAILED = "flow_discovery_failed"
FLOW_DISCOVERY_CACHE_HIT = "flow_discovery_cache_hit"
FLOW_RULE_SKIPPED = "flow_rule_skipped"
FLOW_TOOLS_COMPILED = "flow_tools_compiled"
PARAMETER_ORDER_CACHED = "parameter_order_cached"
PARAMETER_LINE_PARSED = "parameter_line_parsed"

# Flow invocation
FLOW_COMMAND_REGISTERED = "flow_command_registered"
FLOW_TRIGGER_STARTED = "flow_trigger_started"
FLOW_TRIGGERED = "flow_triggered"
FLOW_TRIGGER_FAILED = "flow_trigger_failed"
TOKEN_ORDER_FALLBACK = "token_order_fallback"
TOKEN_SLOTS_OVERFLOW = "token_slots_overflow"

# Rule store
RULE_STORE_REQUEST_FAILED = "rule_store_request_failed"
RULE_STORE_LOADED = "rule_store_loaded"
