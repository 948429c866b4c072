"""MCP tool protocol: JSON-RPC envelopes, dispatcher, and server wiring."""

from hub_mcp.mcp.dispatcher import McpDispatcher, McpMethod
from hub_mcp.mcp.protocol import ErrorCode, JSONRPCError, JSONRPCRequest
from hub_mcp.mcp.server import create_mcp_server, create_rule_store

__all__ = [
    "ErrorCode",
    "JSONRPCError",
    "JSONRPCRequest",
    "McpDispatcher",
    "McpMethod",
    "create_mcp_server",
    "create_rule_store",
]
