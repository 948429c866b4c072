"""Meta tools for progressive disclosure: search the catalog, run any tool."""

import json
from typing import Any

from hub_mcp.tools.registry import ToolExecutor, ToolNotFoundError, ToolRegistry
from hub_mcp.tools.types import ToolCallResult, ToolDefinition, ToolTier

USE_TOOL = "use_tool"

search_tools_tool = ToolDefinition(
    name="search_tools",
    description=(
        "Search the available tools by keyword. Returns name, description, "
        "category and parameters of each match. Run the result with use_tool."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Search text (e.g., 'flow')"},
            "category": {"type": "string", "description": "Optional category filter (e.g., 'flows')"},
        },
        "required": ["query"],
    },
    tier=ToolTier.META,
    category="meta",
    tags=["search", "discover", "find"],
)

use_tool_tool = ToolDefinition(
    name=USE_TOOL,
    description=(
        "Execute a tool by name, including tools not shown in the tool list. "
        "Use search_tools first to find the tool and its arguments.\n\n"
        "Example: use_tool(name='trigger_any_flow', arguments={'command': 'bedtime'})"
    ),
    input_schema={
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Tool name from search_tools results"},
            "arguments": {"type": "object", "description": "Tool-specific arguments"},
        },
        "required": ["name"],
    },
    tier=ToolTier.META,
    category="meta",
    tags=["execute", "run", "call"],
)


def make_search_tools_executor(registry: ToolRegistry) -> ToolExecutor:
    """Build the search_tools executor over a registry."""

    def search_tools_executor(query: str, category: str | None = None) -> str:
        matches = [
            {
                "name": tool.name,
                "description": tool.description,
                "category": tool.category,
                "tier": tool.tier.value,
                "parameters": tool.input_schema.get("properties", {}),
                "required": tool.required_arguments,
            }
            for tool in registry.search(query, category)
            if tool.name != USE_TOOL
        ]
        return json.dumps({"query": query, "count": len(matches), "tools": matches}, indent=2)

    return search_tools_executor


def make_use_tool_executor(registry: ToolRegistry) -> ToolExecutor:
    """Build the use_tool executor that forwards to ``registry.execute``."""

    async def use_tool_executor(name: str, arguments: dict[str, Any] | None = None) -> ToolCallResult:
        if name == USE_TOOL:
            return ToolCallResult.error("use_tool cannot call itself")
        if arguments is not None and not isinstance(arguments, dict):
            return ToolCallResult.error("'arguments' must be an object")

        try:
            return await registry.execute(name, arguments or {})
        except ToolNotFoundError:
            return ToolCallResult.error(
                f"Tool '{name}' not found. Use search_tools to discover available tools."
            )

    return use_tool_executor
