"""Rule store collaborators.

The flow engine never talks to the hub directly; it goes through a
``RuleStore``: list simple rules, list composite rules, and fire the marker
trigger with a token set.
"""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from hub_mcp.flows.types import TokenSet
from hub_mcp.telemetry import RULE_STORE_LOADED, get_logger

log = get_logger(__name__)

RawRules = dict[str, dict[str, Any]]


class RuleStoreError(Exception):
    """Raised when the rule store cannot be read or the trigger cannot be fired."""


@runtime_checkable
class RuleStore(Protocol):
    """Boundary to the hub's automation-rule store."""

    async def get_simple_rules(self) -> RawRules:
        """All simple (single-trigger) rules keyed by rule id."""
        ...

    async def get_composite_rules(self) -> RawRules:
        """All composite (card-based) rules keyed by rule id."""
        ...

    async def fire_trigger(self, tokens: TokenSet, state: dict[str, Any]) -> None:
        """Fire the marker trigger.

        Args:
            tokens: Token values made available to the rule.
            state: Matching state; rules listening for ``state['command']`` run.
        """
        ...


class InMemoryRuleStore:
    """Rule store held in memory.

    Used by the ``memory`` and ``file`` backends and in tests. Fired token
    sets are kept in ``fired`` so callers can inspect what ran.
    """

    def __init__(
        self,
        simple_rules: RawRules | None = None,
        composite_rules: RawRules | None = None,
    ) -> None:
        self.simple_rules: RawRules = dict(simple_rules or {})
        self.composite_rules: RawRules = dict(composite_rules or {})
        self.fired: list[tuple[TokenSet, dict[str, Any]]] = []

    @classmethod
    def from_yaml(cls, path: Path) -> "InMemoryRuleStore":
        """Load rules from a YAML file with ``simple`` and ``composite`` maps.

        Example file::

            simple:
              flow-1:
                name: mcp_radio_on
                trigger:
                  id: ai_tool_call
                  args: {command: radio_on}
            composite: {}

        Raises:
            RuleStoreError: If the file is missing or not shaped as expected.
        """
        if not path.exists():
            raise RuleStoreError(f"Rules file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuleStoreError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise RuleStoreError(f"Rules file {path} must contain a mapping")

        simple = data.get("simple") or {}
        composite = data.get("composite") or {}
        if not isinstance(simple, dict) or not isinstance(composite, dict):
            raise RuleStoreError(f"'simple' and 'composite' in {path} must be mappings")

        log.info(
            RULE_STORE_LOADED,
            path=str(path),
            simple_count=len(simple),
            composite_count=len(composite),
        )
        # YAML turns bare numeric keys into ints; rule ids are strings
        return cls(
            simple_rules={str(key): value for key, value in simple.items()},
            composite_rules={str(key): value for key, value in composite.items()},
        )

    async def get_simple_rules(self) -> RawRules:
        return dict(self.simple_rules)

    async def get_composite_rules(self) -> RawRules:
        return dict(self.composite_rules)

    async def fire_trigger(self, tokens: TokenSet, state: dict[str, Any]) -> None:
        self.fired.append((tokens, dict(state)))
        log.info("marker_trigger_fired", command=tokens.command, tokens=tokens.as_tokens())
