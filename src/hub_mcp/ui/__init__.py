"""UI module for the hub MCP server.

The CLI can be run directly:
    python -m hub_mcp.ui.cli tools --rules rules.yaml

Note: CLI components are not exported from __init__.py to avoid module
loading issues when running as a script.
"""

__all__ = []  # CLI is run directly, no exports needed
