"""HTTP transport for the MCP dispatcher."""

from hub_mcp.service.app import create_app

__all__ = ["create_app"]
