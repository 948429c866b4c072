"""Flow manager: discovery, compilation, and invocation of AI-callable flows.

Usage:
    store = InMemoryRuleStore(simple_rules={...})
    manager = FlowManager(store)
    tools = await manager.get_tools_from_flows()
    result = await manager.trigger_command("radio_on", {"volume": 30})
"""

import time
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from hub_mcp.flows.cache import KnownCommands, ParameterOrderCache
from hub_mcp.flows.compiler import ToolCompiler
from hub_mcp.flows.mapper import TokenMapper
from hub_mcp.flows.naming import DEFAULT_FLOW_PREFIX, flow_name_from_tool, has_flow_prefix
from hub_mcp.flows.scanner import FlowScanner
from hub_mcp.flows.store import RawRules, RuleStore
from hub_mcp.flows.types import ExecutionResult, FlowRecord, RuleRecord
from hub_mcp.telemetry import (
    FLOW_DISCOVERY_CACHE_HIT,
    FLOW_DISCOVERY_COMPLETED,
    FLOW_DISCOVERY_FAILED,
    FLOW_DISCOVERY_STARTED,
    FLOW_RULE_SKIPPED,
    get_logger,
)
from hub_mcp.tools.types import ToolDefinition

log = get_logger(__name__)


class FlowOverviewItem(BaseModel):
    """One rule in the flow overview."""

    id: str
    name: str
    enabled: bool
    type: Literal["regular", "advanced"]
    command: str | None = Field(None, description="AI command if the rule has a marker trigger")
    card_count: int = 0


class FlowOverviewSummary(BaseModel):
    """Totals over the rules included in an overview."""

    total: int = 0
    enabled: int = 0
    disabled: int = 0
    regular: int = 0
    advanced: int = 0
    ai_flows: int = 0


class FlowOverview(BaseModel):
    """All rules with their AI commands."""

    flows: list[FlowOverviewItem] = Field(default_factory=list)
    summary: FlowOverviewSummary = Field(default_factory=FlowOverviewSummary)


class FlowManager:
    """Coordinates the rule store, scanner, compiler, and token mapper.

    Owns the parameter-order cache and the known-command catalog for its
    lifetime.
    """

    def __init__(
        self,
        store: RuleStore,
        scanner: FlowScanner | None = None,
        flow_prefix: str = DEFAULT_FLOW_PREFIX,
        cache_ttl_seconds: float = 0.0,
    ) -> None:
        """Initialize flow manager.

        Args:
            store: Rule store collaborator.
            scanner: Flow scanner (default recognizes the standard marker ids).
            flow_prefix: Prefix of the flow naming convention.
            cache_ttl_seconds: Reuse a discovery result for this long. 0 means
                every call re-reads the store.
        """
        self.store = store
        self.scanner = scanner or FlowScanner()
        self.flow_prefix = flow_prefix
        self.cache_ttl_seconds = cache_ttl_seconds

        self.order_cache = ParameterOrderCache()
        self.known_commands = KnownCommands()
        self.compiler = ToolCompiler(self.order_cache)
        self.mapper = TokenMapper(store, self.order_cache, self.known_commands)

        self._cached_flows: list[FlowRecord] | None = None
        self._cached_at = 0.0

    async def _load_all_rules(self) -> RawRules:
        """Simple and composite rules merged by id (composite wins on a clash)."""
        simple = await self.store.get_simple_rules()
        composite = await self.store.get_composite_rules()
        return {**simple, **composite}

    async def discover_flows(self) -> list[FlowRecord]:
        """Scan every rule for marker triggers.

        Store failures are logged and produce an empty result; one bad rule
        never aborts the scan.

        Returns:
            Flow records in store order.
        """
        if self.cache_ttl_seconds > 0 and self._cached_flows is not None:
            age = time.monotonic() - self._cached_at
            if age < self.cache_ttl_seconds:
                log.debug(FLOW_DISCOVERY_CACHE_HIT, age_seconds=round(age, 3))
                return list(self._cached_flows)

        log.debug(FLOW_DISCOVERY_STARTED)
        try:
            rules = await self._load_all_rules()
        except Exception as e:
            log.error(FLOW_DISCOVERY_FAILED, error=str(e), error_type=type(e).__name__)
            return []

        flows: list[FlowRecord] = []
        for rule_id, raw in rules.items():
            try:
                records = self.scanner.scan(raw, rule_id)
            except Exception as e:
                log.warning(
                    FLOW_RULE_SKIPPED,
                    rule_id=str(rule_id),
                    reason="scan_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            for record in records:
                flows.append(record)
                self.known_commands.register(record.command)

        log.info(FLOW_DISCOVERY_COMPLETED, flow_count=len(flows), rule_count=len(rules))

        self._cached_flows = flows
        self._cached_at = time.monotonic()
        return list(flows)

    def invalidate_cache(self) -> None:
        """Force the next discovery to re-read the store."""
        self._cached_flows = None

    async def get_tools_from_flows(self) -> list[ToolDefinition]:
        """Discover flows and compile them into tool definitions."""
        return self.compiler.compile_all(await self.discover_flows())

    def get_tools_from_commands(self) -> list[ToolDefinition]:
        """Parameterless tool per known command (fallback catalog)."""
        return [
            ToolDefinition(
                name=command,
                description=f"Trigger the '{command}' command in hub flows",
                category="flows",
            )
            for command in self.known_commands.names()
        ]

    async def trigger_command(
        self, command: str, parameters: dict[str, Any] | None = None
    ) -> ExecutionResult:
        """Fire the flows listening for ``command`` with mapped parameters."""
        return await self.mapper.map_and_invoke(command, parameters)

    async def get_prefixed_flows(self) -> list[RuleRecord]:
        """Simple rules whose name carries the AI-callable prefix."""
        try:
            rules = await self.store.get_simple_rules()
        except Exception as e:
            log.error(FLOW_DISCOVERY_FAILED, error=str(e), error_type=type(e).__name__)
            return []

        prefixed = []
        for rule_id, raw in rules.items():
            try:
                rule = self.scanner.validate(raw, rule_id)
            except ValidationError:
                continue
            if rule.name and has_flow_prefix(rule.name, self.flow_prefix):
                prefixed.append(rule)
        return prefixed

    async def get_flow_by_tool_name(self, tool_name: str) -> RuleRecord | None:
        """Find the simple rule named ``<prefix><tool_name>`` (case-insensitive)."""
        flow_name = flow_name_from_tool(tool_name, self.flow_prefix).lower()
        for rule in await self.get_prefixed_flows():
            if rule.name.lower() == flow_name:
                return rule
        return None

    async def get_flow_overview(self, include_disabled: bool = False) -> FlowOverview:
        """Summarize every rule and its AI command.

        Args:
            include_disabled: Also list rules with ``enabled`` set to False.

        Raises:
            Exception: Whatever the store raises; the calling tool reports it.
        """
        rules = await self._load_all_rules()
        overview = FlowOverview()
        summary = overview.summary

        for rule_id, raw in rules.items():
            try:
                rule = self.scanner.validate(raw, rule_id)
            except ValidationError:
                continue

            enabled = rule.enabled is not False
            if not enabled and not include_disabled:
                continue

            flow_type: Literal["regular", "advanced"] = "advanced" if rule.is_composite else "regular"
            command = self.scanner.extract_command(rule)
            card_count = len(rule.card_items()) if rule.is_composite else int(rule.trigger is not None)

            summary.total += 1
            if enabled:
                summary.enabled += 1
            else:
                summary.disabled += 1
            if flow_type == "advanced":
                summary.advanced += 1
            else:
                summary.regular += 1
            if command:
                summary.ai_flows += 1

            overview.flows.append(
                FlowOverviewItem(
                    id=rule.id or str(rule_id),
                    name=rule.name,
                    enabled=enabled,
                    type=flow_type,
                    command=command,
                    card_count=card_count,
                )
            )

        return overview
