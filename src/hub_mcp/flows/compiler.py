"""Tool compiler: turns scanned flow records into tool definitions.

Each compile also records the positional parameter order of the command in
the ``ParameterOrderCache`` so the token mapper can later place named
arguments into ``value1..value5``.
"""

from hub_mcp.flows.cache import ParameterOrderCache
from hub_mcp.flows.dsl import parse_parameters
from hub_mcp.flows.types import TOKEN_SLOT_COUNT, FlowRecord, ParsedParameters, token_name
from hub_mcp.telemetry import FLOW_TOOLS_COMPILED, get_logger
from hub_mcp.tools.types import ToolDefinition, ToolTier

log = get_logger(__name__)


def build_description(record: FlowRecord, parsed: ParsedParameters) -> str:
    """Build the agent-facing description of a flow tool.

    The token mapping note (``name=[[value<k>]]``) tells the agent how named
    arguments land in the flow's positional tokens.
    """
    description = record.description or f'Trigger flow "{record.flow_name}"'

    if not parsed.order:
        return description

    description += f" (params: {', '.join(parsed.order)})"
    mappings = [f"{name}=[[{token_name(index)}]]" for index, name in enumerate(parsed.order)]
    description += f". Token mapping: {', '.join(mappings)}"

    if len(parsed.order) > TOKEN_SLOT_COUNT:
        dropped = parsed.order[TOKEN_SLOT_COUNT:]
        description += (
            f". Note: flows receive at most {TOKEN_SLOT_COUNT} values; "
            f"{', '.join(dropped)} will not be passed"
        )

    return description


class ToolCompiler:
    """Compiles flow records into ``ToolDefinition`` objects."""

    def __init__(self, order_cache: ParameterOrderCache) -> None:
        self.order_cache = order_cache

    def compile(self, record: FlowRecord) -> ToolDefinition:
        """Compile one flow record and cache its parameter order.

        Args:
            record: Scanned flow record.

        Returns:
            Tool definition named after the record's command.
        """
        parsed = parse_parameters(record.parameters)
        self.order_cache.set(record.command, parsed.order)

        return ToolDefinition(
            name=record.command,
            description=build_description(record, parsed),
            input_schema=parsed.input_schema(),
            tier=ToolTier.CORE,
            category="flows",
            tags=["flow", record.flow_name],
        )

    def compile_all(self, records: list[FlowRecord]) -> list[ToolDefinition]:
        """Compile every record, in order.

        Returns:
            One tool definition per record (duplicates are not filtered here).
        """
        tools = [self.compile(record) for record in records]
        log.debug(FLOW_TOOLS_COMPILED, count=len(tools), tools=[t.name for t in tools])
        return tools
