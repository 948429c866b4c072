"""Flow tools for triggering, refreshing, and summarizing hub flows.

Tool definitions are module-level; executors are built per FlowManager by
the ``make_*_executor`` factories so no flow state lives at module scope.
"""

import json
from typing import TYPE_CHECKING, Any

from hub_mcp.tools.registry import ToolExecutor
from hub_mcp.tools.types import ToolCallResult, ToolDefinition, ToolTier

if TYPE_CHECKING:
    from hub_mcp.flows.manager import FlowManager

TRIGGER_ANY_FLOW = "trigger_any_flow"

trigger_any_flow_tool = ToolDefinition(
    name=TRIGGER_ANY_FLOW,
    description=(
        "Trigger any hub flow by command name. Use this for flows that exist "
        "but are not in the current tool list (for example, right after "
        "refresh_flows found them). Parameters are mapped onto the flow's "
        "value1..value5 tokens in the flow's declared parameter order."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "description": "Exact command name from the flow (e.g., 'start_radio')",
            },
            "parameters": {
                "type": "object",
                "description": "Optional parameters as key-value pairs",
                "additionalProperties": True,
            },
        },
        "required": ["command"],
    },
    tier=ToolTier.HIDDEN,
    category="flows",
    tags=["flow", "trigger", "command", "workaround"],
)

refresh_flows_tool = ToolDefinition(
    name="refresh_flows",
    description=(
        "Re-scan the hub for flows that use the AI command trigger. Shows every "
        "discovered flow with its command and parameters, and whether anything "
        "changed since the last refresh. New flows can be run immediately with "
        "trigger_any_flow."
    ),
    tier=ToolTier.HIDDEN,
    category="flows",
    tags=["flow", "refresh", "discover", "rescan"],
)

list_known_commands_tool = ToolDefinition(
    name="list_known_commands",
    description=(
        "List every flow command seen so far, including commands that were "
        "triggered before discovery found them."
    ),
    tier=ToolTier.HIDDEN,
    category="flows",
    tags=["flow", "command", "list"],
)

get_flow_overview_tool = ToolDefinition(
    name="get_flow_overview",
    description=(
        "Get an overview of all hub flows: id, name, enabled state, type "
        "(regular or advanced), the AI command if the flow has one, and totals."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "include_disabled": {
                "type": "boolean",
                "description": "Also list disabled flows (default: false)",
            },
        },
        "required": [],
    },
    tier=ToolTier.CORE,
    category="flows",
    tags=["flow", "overview", "summary", "automation"],
)


class ToolListState:
    """Last serialized flow-tool list, for change detection between refreshes."""

    def __init__(self) -> None:
        self._last = ""

    def has_changed(self, value: str) -> bool:
        return self._last != value

    def update(self, value: str) -> None:
        self._last = value


def _format_property(name: str, prop: dict[str, Any], required: bool) -> str:
    line = f"     - {name}: {prop.get('type', 'string')} ({'required' if required else 'optional'})"
    if prop.get("description"):
        line += f" - {prop['description']}"
    if prop.get("enum"):
        line += f" [{'|'.join(prop['enum'])}]"
    if "minimum" in prop or "maximum" in prop:
        line += f" [{prop.get('minimum', '?')}-{prop.get('maximum', '?')}]"
    return line


def make_trigger_any_flow_executor(flow_manager: "FlowManager") -> ToolExecutor:
    """Build the trigger_any_flow executor bound to a flow manager."""

    async def trigger_any_flow_executor(
        command: str, parameters: dict[str, Any] | None = None
    ) -> ToolCallResult:
        if parameters is not None and not isinstance(parameters, dict):
            return ToolCallResult.error("'parameters' must be an object")

        result = await flow_manager.trigger_command(command, parameters or {})
        if result.success:
            return ToolCallResult.text(f"Successfully triggered flow: {command}\n{result.message or ''}")
        return ToolCallResult.error(
            f"Failed to trigger flow: {command}\n{result.error or 'Unknown error'}"
        )

    return trigger_any_flow_executor


def make_refresh_flows_executor(
    flow_manager: "FlowManager", state: ToolListState | None = None
) -> ToolExecutor:
    """Build the refresh_flows executor.

    Args:
        flow_manager: Flow manager to re-discover with.
        state: Change-detection state shared across calls.
    """
    state = state or ToolListState()

    async def refresh_flows_executor() -> ToolCallResult:
        flow_manager.invalidate_cache()
        tools = await flow_manager.get_tools_from_flows()
        serialized = json.dumps([tool.to_wire() for tool in tools], sort_keys=True)
        changed = state.has_changed(serialized)
        state.update(serialized)

        lines = [f"Flow refresh complete. Found {len(tools)} flow(s) with AI command triggers.", ""]
        if changed:
            lines.append(
                "Changes detected. New flows can be triggered right now with "
                f"'{TRIGGER_ANY_FLOW}' using the command names and parameters below."
            )
        else:
            lines.append("No changes detected. Tool list is up to date.")

        for index, tool in enumerate(tools, start=1):
            lines.append("")
            lines.append(f"{index}. {tool.name}")
            lines.append(f"   Description: {tool.description}")
            properties = tool.input_schema.get("properties", {})
            if properties:
                required = set(tool.required_arguments)
                lines.append("   Parameters:")
                for name, prop in properties.items():
                    lines.append(_format_property(name, prop, name in required))

        return ToolCallResult.text("\n".join(lines))

    return refresh_flows_executor


def make_list_known_commands_executor(flow_manager: "FlowManager") -> ToolExecutor:
    """Build the list_known_commands executor."""

    def list_known_commands_executor() -> str:
        commands = [tool.name for tool in flow_manager.get_tools_from_commands()]
        return json.dumps({"commands": commands, "count": len(commands)}, indent=2)

    return list_known_commands_executor


def make_get_flow_overview_executor(flow_manager: "FlowManager") -> ToolExecutor:
    """Build the get_flow_overview executor."""

    async def get_flow_overview_executor(include_disabled: bool = False) -> str:
        overview = await flow_manager.get_flow_overview(include_disabled=bool(include_disabled))
        return overview.model_dump_json(indent=2)

    return get_flow_overview_executor
