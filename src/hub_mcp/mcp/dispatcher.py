"""MCP protocol dispatcher.

Maps the closed set of supported JSON-RPC methods to handler coroutines.
Every request yields a well-formed JSON-RPC response: handler failures are
turned into error envelopes here and never reach the transport.

Usage:
    dispatcher = McpDispatcher(registry, flow_manager)
    response = await dispatcher.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
"""

import time
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from hub_mcp.flows.manager import FlowManager
from hub_mcp.mcp.protocol import (
    ErrorCode,
    JSONRPCError,
    JSONRPCRequest,
    RequestId,
    error_response,
    success_response,
)
from hub_mcp.security import sanitize_error_message
from hub_mcp.telemetry import (
    MCP_CLIENT_INITIALIZED,
    MCP_ERROR_SENT,
    MCP_INTERNAL_ERROR,
    MCP_REQUEST_RECEIVED,
    MCP_RESPONSE_SENT,
    TOOL_NAME_CONFLICT,
    TraceContext,
    get_logger,
)
from hub_mcp.tools.flow_tools import TRIGGER_ANY_FLOW
from hub_mcp.tools.registry import ToolRegistry
from hub_mcp.tools.types import ToolDefinition

log = get_logger(__name__)

DEFAULT_PROTOCOL_VERSION = "2025-06-18"


class McpMethod(str, Enum):
    """Supported protocol methods."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PING = "ping"
    PROMPTS_LIST = "prompts/list"
    RESOURCES_LIST = "resources/list"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"


Handler = Callable[[dict[str, Any], TraceContext], Awaitable[dict[str, Any]]]


def _request_id_of(message: Any) -> RequestId:
    """Best-effort id of a message that failed validation."""
    if isinstance(message, dict):
        request_id = message.get("id")
        if isinstance(request_id, (str, int, float)) and not isinstance(request_id, bool):
            return request_id
    return None


class McpDispatcher:
    """Stateless request/response handler for the MCP tool protocol."""

    def __init__(
        self,
        registry: ToolRegistry,
        flow_manager: FlowManager | None = None,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        server_name: str = "hub-mcp-server",
        server_version: str = "0.1.0",
    ) -> None:
        """Initialize dispatcher.

        Args:
            registry: Registry of statically registered tools.
            flow_manager: Source of compiled flow tools. Without one, only
                registry tools are listed and callable.
            protocol_version: Version reported by ``initialize``.
            server_name: Server name reported by ``initialize``.
            server_version: Server version reported by ``initialize``.
        """
        self.registry = registry
        self.flow_manager = flow_manager
        self.protocol_version = protocol_version
        self.server_name = server_name
        self.server_version = server_version

        self._handlers: dict[McpMethod, Handler] = {
            McpMethod.INITIALIZE: self._handle_initialize,
            McpMethod.TOOLS_LIST: self._handle_tools_list,
            McpMethod.TOOLS_CALL: self._handle_tools_call,
            McpMethod.PING: self._handle_ping,
            McpMethod.PROMPTS_LIST: self._handle_prompts_list,
            McpMethod.RESOURCES_LIST: self._handle_resources_list,
            McpMethod.NOTIFICATIONS_INITIALIZED: self._handle_notifications_initialized,
        }

    async def handle(self, message: Any) -> dict[str, Any]:
        """Handle one parsed JSON-RPC message.

        Args:
            message: Decoded JSON body.

        Returns:
            JSON-RPC response envelope. The request id is echoed verbatim;
            ``null`` is used when the request carried none.
        """
        try:
            request = JSONRPCRequest.model_validate(message)
        except ValidationError as e:
            request_id = _request_id_of(message)
            log.warning(MCP_ERROR_SENT, code=int(ErrorCode.INVALID_REQUEST), error=str(e))
            return error_response(request_id, ErrorCode.INVALID_REQUEST, "Invalid Request")

        trace_ctx = TraceContext.new_trace(request_id=request.id)
        log.info(
            MCP_REQUEST_RECEIVED,
            method=request.method,
            request_id=request.id,
            trace_id=trace_ctx.trace_id,
        )
        start_time = time.monotonic()

        try:
            method = McpMethod(request.method)
        except ValueError:
            return self._error(
                request.id,
                ErrorCode.METHOD_NOT_FOUND,
                f"Method not found: {request.method}",
                trace_ctx,
            )

        try:
            result = await self._handlers[method](request.params or {}, trace_ctx)
        except JSONRPCError as e:
            return self._error(request.id, e.code, e.message, trace_ctx, e.data)
        except Exception as e:
            log.error(
                MCP_INTERNAL_ERROR,
                method=request.method,
                error=str(e),
                error_type=type(e).__name__,
                trace_id=trace_ctx.trace_id,
                exc_info=True,
            )
            return self._error(
                request.id,
                ErrorCode.INTERNAL_ERROR,
                f"Internal error: {sanitize_error_message(e)}",
                trace_ctx,
            )

        log.info(
            MCP_RESPONSE_SENT,
            method=request.method,
            request_id=request.id,
            latency_ms=(time.monotonic() - start_time) * 1000,
            trace_id=trace_ctx.trace_id,
        )
        return success_response(request.id, result)

    def _error(
        self,
        request_id: RequestId,
        code: int,
        message: str,
        trace_ctx: TraceContext,
        data: Any = None,
    ) -> dict[str, Any]:
        log.warning(
            MCP_ERROR_SENT,
            code=int(code),
            message=message,
            request_id=request_id,
            trace_id=trace_ctx.trace_id,
        )
        return error_response(request_id, code, message, data)

    async def list_tools(self) -> list[ToolDefinition]:
        """Visible registry tools followed by freshly compiled flow tools.

        A flow tool whose name is already taken (by any registry tool or an
        earlier flow tool) is dropped and logged, so names stay unique.
        """
        tools = self.registry.list_visible()
        if self.flow_manager is None:
            return tools

        seen = set(self.registry.list_tool_names())
        for tool in await self.flow_manager.get_tools_from_flows():
            if tool.name in seen:
                log.warning(TOOL_NAME_CONFLICT, tool_name=tool.name, source="flow")
                continue
            seen.add(tool.name)
            tools.append(tool)
        return tools

    async def _handle_initialize(self, params: dict[str, Any], trace_ctx: TraceContext) -> dict[str, Any]:
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    async def _handle_tools_list(self, params: dict[str, Any], trace_ctx: TraceContext) -> dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in await self.list_tools()]}

    async def _handle_tools_call(self, params: dict[str, Any], trace_ctx: TraceContext) -> dict[str, Any]:
        name = params.get("name")
        if not name or not isinstance(name, str):
            raise JSONRPCError(ErrorCode.INVALID_PARAMS, "Invalid params: missing tool name")

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise JSONRPCError(ErrorCode.INVALID_PARAMS, "Invalid params: arguments must be an object")

        if self.registry.has(name):
            result = await self.registry.execute(name, arguments, trace_ctx)
            return result.to_wire()

        if self.flow_manager is not None:
            flow_tools = await self.flow_manager.get_tools_from_flows()
            if any(tool.name == name for tool in flow_tools):
                log.debug("flow_tool_call_delegated", tool_name=name, trace_id=trace_ctx.trace_id)
                result = await self.registry.execute(
                    TRIGGER_ANY_FLOW,
                    {"command": name, "parameters": arguments},
                    trace_ctx,
                )
                return result.to_wire()

        raise JSONRPCError(
            ErrorCode.INVALID_PARAMS,
            f"Tool '{name}' not found. Use refresh_flows to update the tool list.",
        )

    async def _handle_ping(self, params: dict[str, Any], trace_ctx: TraceContext) -> dict[str, Any]:
        return {}

    async def _handle_prompts_list(self, params: dict[str, Any], trace_ctx: TraceContext) -> dict[str, Any]:
        return {"prompts": []}

    async def _handle_resources_list(self, params: dict[str, Any], trace_ctx: TraceContext) -> dict[str, Any]:
        return {"resources": []}

    async def _handle_notifications_initialized(
        self, params: dict[str, Any], trace_ctx: TraceContext
    ) -> dict[str, Any]:
        log.info(MCP_CLIENT_INITIALIZED, trace_id=trace_ctx.trace_id)
        return {}
