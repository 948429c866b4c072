"""Tool registry for tool registration, discovery, and execution.

This module provides the ToolRegistry class that manages tool definitions
and their executor functions with tiered visibility: core and meta tools are
listed to the agent, hidden tools are only callable by exact name.
"""

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Union

from hub_mcp.telemetry import (
    TOOL_CALL_COMPLETED,
    TOOL_CALL_FAILED,
    TOOL_CALL_STARTED,
    TOOL_REGISTERED,
    TraceContext,
    get_logger,
)
from hub_mcp.tools.types import ToolCallResult, ToolDefinition, ToolTier

log = get_logger(__name__)

ToolOutput = Union[ToolCallResult, str]
ToolExecutor = Callable[..., Union[ToolOutput, Awaitable[ToolOutput]]]


class DuplicateToolError(ValueError):
    """Raised when a tool name is registered twice."""


class ToolNotFoundError(LookupError):
    """Raised when executing a tool name that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' not found")
        self.name = name


class ToolArgumentError(ValueError):
    """Raised when required tool arguments are missing."""


class ToolRegistry:
    """Central registry of statically registered tools.

    The registry is built once at startup; registering the same name twice is
    a programming error and raises immediately.
    """

    def __init__(self) -> None:
        """Initialize empty tool registry."""
        self._tools: dict[str, tuple[ToolDefinition, ToolExecutor]] = {}
        log.debug("tool_registry_initialized")

    def register(self, tool_def: ToolDefinition, executor: ToolExecutor) -> None:
        """Register a tool with its definition and executor function.

        Args:
            tool_def: Tool definition; its ``tier`` decides visibility.
            executor: Callable (sync or async) that accepts the tool's
                arguments as keyword arguments and returns a ToolCallResult
                or plain text.

        Raises:
            DuplicateToolError: If the tool name is already registered.
        """
        if tool_def.name in self._tools:
            raise DuplicateToolError(f"Tool '{tool_def.name}' is already registered")

        self._tools[tool_def.name] = (tool_def, executor)
        log.debug(
            TOOL_REGISTERED,
            tool_name=tool_def.name,
            tier=tool_def.tier.value,
            category=tool_def.category,
        )

    def register_meta(self, tool_def: ToolDefinition, executor: ToolExecutor) -> None:
        """Register a meta tool (always listed, used to reach other tools)."""
        self.register(tool_def.model_copy(update={"tier": ToolTier.META}), executor)

    def register_hidden(self, tool_def: ToolDefinition, executor: ToolExecutor) -> None:
        """Register a hidden tool (never listed, callable by exact name)."""
        self.register(tool_def.model_copy(update={"tier": ToolTier.HIDDEN}), executor)

    def has(self, name: str) -> bool:
        """Check whether a tool name is registered."""
        return name in self._tools

    def get_tool(self, name: str) -> tuple[ToolDefinition, ToolExecutor] | None:
        """Retrieve tool definition and executor, or None if unknown."""
        return self._tools.get(name)

    def list_tools(self, tier: ToolTier | None = None) -> list[ToolDefinition]:
        """List registered tools, optionally limited to one tier."""
        if tier is None:
            return [tool_def for tool_def, _ in self._tools.values()]
        return [tool_def for tool_def, _ in self._tools.values() if tool_def.tier == tier]

    def list_visible(self) -> list[ToolDefinition]:
        """List tools shown to the agent (core and meta tiers)."""
        return [
            tool_def
            for tool_def, _ in self._tools.values()
            if tool_def.tier in (ToolTier.CORE, ToolTier.META)
        ]

    def list_tool_names(self) -> list[str]:
        """List names of all registered tools, hidden ones included."""
        return list(self._tools.keys())

    def count(self) -> int:
        """Number of registered tools."""
        return len(self._tools)

    def search(self, query: str, category: str | None = None) -> list[ToolDefinition]:
        """Search tools by substring over name, description, and tags.

        Args:
            query: Case-insensitive search text.
            category: Optional category filter.

        Returns:
            Matching tool definitions in registration order.
        """
        needle = query.lower()
        matches = []
        for tool_def, _ in self._tools.values():
            if category and tool_def.category != category:
                continue
            haystack = " ".join([tool_def.name, tool_def.description, *tool_def.tags]).lower()
            if needle in haystack:
                matches.append(tool_def)
        return matches

    async def execute(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        trace_ctx: TraceContext | None = None,
    ) -> ToolCallResult:
        """Execute a tool by name.

        Arguments not declared in the tool's input schema are dropped before
        the executor is called. Any exception raised by the tool body is
        converted into an error-flagged result.

        Args:
            name: Exact tool name (any tier).
            arguments: Tool arguments.
            trace_ctx: Trace context of the originating request.

        Returns:
            ToolCallResult from the tool, or an error-flagged result.

        Raises:
            ToolNotFoundError: If no tool with this name is registered.
        """
        entry = self._tools.get(name)
        if entry is None:
            raise ToolNotFoundError(name)

        tool_def, executor = entry
        arguments = arguments or {}
        trace_ctx = trace_ctx or TraceContext.new_trace()

        declared = tool_def.argument_names
        filtered_arguments = {k: v for k, v in arguments.items() if k in declared}
        ignored = sorted(set(arguments) - declared)
        if ignored:
            log.warning(
                "tool_call_undeclared_arguments_dropped",
                tool_name=name,
                ignored_arguments=ignored,
                trace_id=trace_ctx.trace_id,
            )

        _, span_id = trace_ctx.new_span()
        log.info(
            TOOL_CALL_STARTED,
            tool_name=name,
            arguments=filtered_arguments,
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )
        start_time = time.monotonic()

        try:
            missing = [
                arg for arg in tool_def.required_arguments if filtered_arguments.get(arg) is None
            ]
            if missing:
                raise ToolArgumentError(f"Missing required arguments: {', '.join(missing)}")

            if inspect.iscoroutinefunction(executor):
                output = await executor(**filtered_arguments)
            else:
                output = await asyncio.to_thread(executor, **filtered_arguments)
            result = output if isinstance(output, ToolCallResult) else ToolCallResult.text(output)

            log.info(
                TOOL_CALL_COMPLETED,
                tool_name=name,
                is_error=result.is_error,
                latency_ms=(time.monotonic() - start_time) * 1000,
                trace_id=trace_ctx.trace_id,
                span_id=span_id,
            )
            return result

        except Exception as e:
            log.error(
                TOOL_CALL_FAILED,
                tool_name=name,
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=(time.monotonic() - start_time) * 1000,
                trace_id=trace_ctx.trace_id,
                span_id=span_id,
                exc_info=True,
            )
            return ToolCallResult.error(f"executing tool '{name}' failed: {e}")
