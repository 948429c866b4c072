"""Flow scanner: finds marker-triggered rules in raw hub records.

Handles both rule shapes the hub returns:
- simple rules with a single ``trigger`` card
- composite rules with ``cards`` as a list or an id -> card map
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from hub_mcp.flows.types import (
    MARKER_TRIGGER_SHORT_ID,
    MARKER_TRIGGER_SUFFIX,
    FlowCard,
    FlowRecord,
    RuleRecord,
)
from hub_mcp.telemetry import FLOW_RULE_SKIPPED, get_logger

log = get_logger(__name__)

DEFAULT_MARKER_FULL_ID = "homey:app:nl.joonix.aichatcontrol:ai_tool_call"


class FlowScanner:
    """Extracts AI-callable flow records from hub rules."""

    def __init__(self, marker_full_id: str = DEFAULT_MARKER_FULL_ID) -> None:
        """Initialize scanner.

        Args:
            marker_full_id: Fully-qualified marker trigger id. The short id and
                any id ending in ``:ai_tool_call`` are always recognized too.
        """
        self.marker_ids = frozenset({MARKER_TRIGGER_SHORT_ID, marker_full_id})

    def is_marker_trigger(self, card_id: str | None) -> bool:
        """Check whether a card id identifies the marker trigger."""
        if not card_id:
            return False
        return card_id in self.marker_ids or card_id.endswith(MARKER_TRIGGER_SUFFIX)

    def validate(self, raw: RuleRecord | Mapping[str, Any], rule_id: Any = None) -> RuleRecord:
        """Validate a raw hub record into a RuleRecord.

        Args:
            raw: Raw record from the rule store (or an already validated one).
            rule_id: Store key, used (as a string) when the record carries no ``id``.

        Raises:
            ValidationError: If the record does not have the expected shape.
        """
        rule = raw if isinstance(raw, RuleRecord) else RuleRecord.model_validate(raw)
        if rule.id is None and rule_id is not None:
            rule = rule.model_copy(update={"id": str(rule_id)})
        return rule

    def scan(self, raw: RuleRecord | Mapping[str, Any], rule_id: Any = None) -> list[FlowRecord]:
        """Scan one rule for marker triggers.

        Args:
            raw: Raw hub record or RuleRecord.
            rule_id: Store key of the record.

        Returns:
            Zero or more flow records. Simple rules yield at most one; composite
            rules yield one per marker trigger card. Disabled or malformed
            rules yield none.
        """
        try:
            rule = self.validate(raw, rule_id)
        except ValidationError as e:
            log.warning(
                FLOW_RULE_SKIPPED,
                rule_id=rule_id,
                reason="invalid_record",
                error_count=e.error_count(),
            )
            return []

        if rule.enabled is False:
            return []

        if rule.trigger is not None:
            if not self.is_marker_trigger(rule.trigger.id):
                return []
            record = self._extract(rule, rule.trigger)
            return [record] if record else []

        records = []
        for card_key, card in rule.card_items():
            if card.type != "trigger" or not self.is_marker_trigger(card.id):
                continue
            record = self._extract(rule, card, card_key)
            if record:
                records.append(record)
        return records

    def extract_command(self, raw: RuleRecord | Mapping[str, Any]) -> str | None:
        """First marker command of a rule regardless of its enabled flag.

        Used for overviews, where disabled rules are still reported.
        """
        try:
            rule = self.validate(raw)
        except ValidationError:
            return None

        cards = [rule.trigger] if rule.trigger is not None else [c for _, c in rule.card_items()]
        for card in cards:
            if rule.trigger is None and card.type != "trigger":
                continue
            if self.is_marker_trigger(card.id):
                command = (card.args or {}).get("command")
                return command if isinstance(command, str) else None
        return None

    def _extract(self, rule: RuleRecord, card: FlowCard, card_key: str | None = None) -> FlowRecord | None:
        """Build a FlowRecord from a marker card's arguments."""
        args = card.args or {}
        command = args.get("command")

        if not command or not isinstance(command, str):
            log.info(
                FLOW_RULE_SKIPPED,
                rule_id=rule.id,
                rule_name=rule.name,
                card_id=card_key,
                reason="missing_command",
            )
            return None

        description = args.get("description")
        parameters = args.get("parameters")

        return FlowRecord(
            flow_id=rule.id or "unknown",
            flow_name=rule.name,
            command=command,
            description=description if isinstance(description, str) else None,
            parameters=parameters if isinstance(parameters, str) else None,
            card_id=card_key,
        )
