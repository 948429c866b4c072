"""Type definitions for flow discovery, compilation, and invocation.

Raw hub records are loosely typed JSON. ``RuleRecord`` and ``FlowCard``
capture only the fields the scanner reads and are the validation boundary:
nothing untyped flows past the scanner.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Number of positional value slots the marker trigger exposes (value1..value5)
TOKEN_SLOT_COUNT = 5

# Short id of the marker trigger card; the fully-qualified form is configurable
MARKER_TRIGGER_SHORT_ID = "ai_tool_call"
MARKER_TRIGGER_SUFFIX = ":ai_tool_call"


class FlowCard(BaseModel):
    """One card (trigger, condition, or action) of a hub rule."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(None, description="Card type id, e.g. 'ai_tool_call'")
    type: str | None = Field(None, description="Card kind: trigger, condition, or action")
    uri: str | None = Field(None, description="Owner URI, e.g. 'homey:app:com.athom.hue'")
    args: dict[str, Any] | None = Field(None, description="Configured card arguments")


class RuleRecord(BaseModel):
    """Narrow view of a hub automation rule (simple or composite)."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(None, description="Rule id (falls back to the store key)")
    name: str = Field("", description="User-facing rule name")
    enabled: bool | None = Field(None, description="False excludes the rule from discovery")
    trigger: FlowCard | None = Field(None, description="Single trigger of a simple rule")
    cards: list[FlowCard] | dict[str, FlowCard] | None = Field(
        None, description="Cards of a composite rule (list or id -> card map)"
    )

    @field_validator("name", mode="before")
    @classmethod
    def default_missing_name(cls, v: str | None) -> str:
        """Treat a null name like a missing one."""
        return "" if v is None else v

    @property
    def is_composite(self) -> bool:
        """Whether this is a composite (card-based) rule."""
        return self.cards is not None

    def card_items(self) -> list[tuple[str | None, FlowCard]]:
        """Cards as (card key, card) pairs; list-style cards have no key."""
        if self.cards is None:
            return []
        if isinstance(self.cards, dict):
            return list(self.cards.items())
        return [(None, card) for card in self.cards]


class FlowRecord(BaseModel):
    """One AI-callable rule found by the scanner."""

    model_config = ConfigDict(frozen=True)

    flow_id: str = Field(..., description="Rule id")
    flow_name: str = Field(..., description="Rule name")
    command: str = Field(..., description="Command configured on the marker trigger")
    description: str | None = Field(None, description="Free-text description for the agent")
    parameters: str | None = Field(None, description="Raw parameter DSL text")
    card_id: str | None = Field(None, description="Key of the marker card in a composite rule")
    enabled: bool = Field(True, description="Always true; disabled rules are never scanned")


class PropertySchema(BaseModel):
    """JSON-Schema fragment for one flow parameter."""

    type: Literal["string", "number", "boolean"] = Field(..., description="Parameter type")
    description: str = Field("", description="Human description from the DSL line")
    minimum: float | None = Field(None, description="Inclusive lower bound (number only)")
    maximum: float | None = Field(None, description="Inclusive upper bound (number only)")
    enum: list[str] | None = Field(None, description="Allowed literals (string only)")

    def to_json_schema(self) -> dict[str, Any]:
        """Render as a JSON-Schema dict, omitting unset constraints."""
        return self.model_dump(exclude_none=True)


class ParsedParameters(BaseModel):
    """Result of parsing a parameter DSL block."""

    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    order: list[str] = Field(
        default_factory=list, description="Parameter names in source order (positional order)"
    )

    def input_schema(self) -> dict[str, Any]:
        """Build the ``inputSchema`` object for a tool definition."""
        return {
            "type": "object",
            "properties": {
                name: prop.to_json_schema() for name, prop in self.properties.items()
            },
            "required": list(self.required),
        }


class TokenSet(BaseModel):
    """Fixed token interface handed to the marker trigger when firing a rule."""

    model_config = ConfigDict(frozen=True)

    command: str
    value1: str = ""
    value2: str = ""
    value3: str = ""
    value4: str = ""
    value5: str = ""

    @classmethod
    def from_slots(cls, command: str, slots: list[str]) -> "TokenSet":
        """Build a token set from positional slot values.

        Args:
            command: Command name.
            slots: Exactly ``TOKEN_SLOT_COUNT`` string values.

        Raises:
            ValueError: If the slot count is wrong.
        """
        if len(slots) != TOKEN_SLOT_COUNT:
            raise ValueError(f"Expected {TOKEN_SLOT_COUNT} token slots, got {len(slots)}")
        return cls(command=command, **{token_name(i): value for i, value in enumerate(slots)})

    def slots(self) -> list[str]:
        """Positional values in slot order."""
        return [self.value1, self.value2, self.value3, self.value4, self.value5]

    def as_tokens(self) -> dict[str, str]:
        """Token dict as passed to the trigger (``command`` + ``value1..value5``)."""
        return self.model_dump()


class ExecutionResult(BaseModel):
    """Outcome of firing a rule through the marker trigger."""

    success: bool
    message: str | None = None
    error: str | None = None
    tokens: TokenSet | None = Field(None, description="Token set that was (or would be) fired")


def token_name(index: int) -> str:
    """Token name for a 0-based slot index (``0 -> 'value1'``)."""
    return f"value{index + 1}"
