"""Type definitions for the tool layer.

Pydantic models for tool definitions and call results, with helpers that
render them in MCP wire format (``inputSchema``, ``isError``).
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ToolTier(str, Enum):
    """Visibility tier of a registered tool.

    core and meta tools appear in ``tools/list``; hidden tools are only
    reachable by exact name, usually through the ``use_tool`` meta tool.
    """

    CORE = "core"
    META = "meta"
    HIDDEN = "hidden"


class ToolDefinition(BaseModel):
    """Public contract of a callable tool."""

    name: str = Field(..., description="Unique tool name (e.g., 'get_flow_overview')")
    description: str = Field(..., description="Description for the calling agent")
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []},
        description="JSON Schema of the arguments object",
    )
    tier: ToolTier = Field(ToolTier.CORE, description="Visibility tier")
    category: str = Field("general", description="Search category (e.g., 'flows', 'meta')")
    tags: list[str] = Field(default_factory=list, description="Search keywords")

    @property
    def required_arguments(self) -> list[str]:
        """Names listed as required in the input schema."""
        return list(self.input_schema.get("required", []))

    @property
    def argument_names(self) -> set[str]:
        """Names declared in the input schema's properties."""
        return set(self.input_schema.get("properties", {}))

    def to_wire(self) -> dict[str, Any]:
        """MCP ``tools/list`` entry."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class TextContent(BaseModel):
    """Text content block of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """Result of a tool call as returned to the agent.

    Tool failures are reported here with ``is_error`` set rather than as
    protocol errors, so the agent can read the explanation and recover.
    """

    content: list[TextContent] = Field(default_factory=list)
    is_error: bool = Field(False, description="Whether the tool reported a failure")

    @classmethod
    def text(cls, text: str) -> "ToolCallResult":
        """Successful result with a single text block."""
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, message: str) -> "ToolCallResult":
        """Error-flagged result with a single text block."""
        return cls(content=[TextContent(text=f"Error: {message}")], is_error=True)

    @property
    def first_text(self) -> str:
        """Text of the first content block (empty if none)."""
        return self.content[0].text if self.content else ""

    def to_wire(self) -> dict[str, Any]:
        """MCP ``tools/call`` result; ``isError`` is only present on failures."""
        result: dict[str, Any] = {"content": [block.model_dump() for block in self.content]}
        if self.is_error:
            result["isError"] = True
        return result
