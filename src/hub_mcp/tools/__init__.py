"""Tool layer: registry, built-in tools, and wire types.

This module provides:
- Tool registry with tiered visibility (core, meta, hidden)
- Flow tools (trigger_any_flow, refresh_flows, list_known_commands, get_flow_overview)
- Meta tools for progressive disclosure (search_tools, use_tool)
"""

from typing import TYPE_CHECKING

from hub_mcp.tools.discovery import (
    make_search_tools_executor,
    make_use_tool_executor,
    search_tools_tool,
    use_tool_tool,
)
from hub_mcp.tools.flow_tools import (
    TRIGGER_ANY_FLOW,
    ToolListState,
    get_flow_overview_tool,
    list_known_commands_tool,
    make_get_flow_overview_executor,
    make_list_known_commands_executor,
    make_refresh_flows_executor,
    make_trigger_any_flow_executor,
    refresh_flows_tool,
    trigger_any_flow_tool,
)
from hub_mcp.tools.registry import (
    DuplicateToolError,
    ToolArgumentError,
    ToolNotFoundError,
    ToolRegistry,
)
from hub_mcp.tools.types import TextContent, ToolCallResult, ToolDefinition, ToolTier

if TYPE_CHECKING:
    from hub_mcp.flows.manager import FlowManager

__all__ = [
    # Core exports
    "ToolRegistry",
    "ToolDefinition",
    "ToolCallResult",
    "ToolTier",
    "TextContent",
    "DuplicateToolError",
    "ToolNotFoundError",
    "ToolArgumentError",
    "TRIGGER_ANY_FLOW",
    # Tool registration function
    "register_builtin_tools",
]


def register_builtin_tools(registry: ToolRegistry, flow_manager: "FlowManager") -> None:
    """Register the built-in tools with the registry.

    This function registers:
    - get_flow_overview (core)
    - search_tools, use_tool (meta)
    - trigger_any_flow, refresh_flows, list_known_commands (hidden)

    Args:
        registry: Tool registry to register tools with.
        flow_manager: Flow manager the flow tools operate on.

    Raises:
        DuplicateToolError: If any built-in name is already registered.
    """
    registry.register(get_flow_overview_tool, make_get_flow_overview_executor(flow_manager))

    registry.register_meta(search_tools_tool, make_search_tools_executor(registry))
    registry.register_meta(use_tool_tool, make_use_tool_executor(registry))

    registry.register_hidden(trigger_any_flow_tool, make_trigger_any_flow_executor(flow_manager))
    registry.register_hidden(
        refresh_flows_tool, make_refresh_flows_executor(flow_manager, ToolListState())
    )
    registry.register_hidden(
        list_known_commands_tool, make_list_known_commands_executor(flow_manager)
    )
