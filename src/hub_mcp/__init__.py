"""Hub MCP Server.

Exposes home-automation hub flows to AI agents as MCP tools: flows carrying
the AI command trigger are compiled into callable tools with a parameter
schema inferred from their description.
"""

__version__ = "0.1.0"
