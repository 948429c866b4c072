"""Naming convention between AI-callable flow names and tool names.

``mcp_radio_toggle`` (flow) <-> ``radio_toggle`` (tool). The two functions
are inverses for lowercase tool names that do not themselves start with the
prefix.
"""

DEFAULT_FLOW_PREFIX = "mcp_"


def tool_name_from_flow(flow_name: str, prefix: str = DEFAULT_FLOW_PREFIX) -> str:
    """Convert a flow name to its tool name.

    The prefix is matched case-insensitively and stripped once, and the
    result is lowercased.

    Example:
        >>> tool_name_from_flow("MCP_Radio_Toggle")
        'radio_toggle'
    """
    lowered = flow_name.lower()
    prefix = prefix.lower()
    if lowered.startswith(prefix):
        return lowered[len(prefix) :]
    return lowered


def flow_name_from_tool(tool_name: str, prefix: str = DEFAULT_FLOW_PREFIX) -> str:
    """Convert a tool name back to its flow name.

    Example:
        >>> flow_name_from_tool("radio_toggle")
        'mcp_radio_toggle'
    """
    return f"{prefix}{tool_name}"


def has_flow_prefix(flow_name: str, prefix: str = DEFAULT_FLOW_PREFIX) -> bool:
    """Whether a flow name carries the AI-callable prefix (case-insensitive)."""
    return flow_name.lower().startswith(prefix.lower())
