"""Tests for FlowManager."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from hub_mcp.flows.manager import FlowManager
from hub_mcp.flows.scanner import FlowScanner
from hub_mcp.flows.store import InMemoryRuleStore, RuleStoreError


def marker_rule(name: str, command: str, **extra: Any) -> dict[str, Any]:
    """Simple rule with a marker trigger."""
    args = {"command": command}
    args.update(extra.pop("args", {}))
    return {"name": name, "trigger": {"id": "ai_tool_call", "args": args}, **extra}


@pytest.fixture
def store() -> InMemoryRuleStore:
    """Store with a mix of simple and composite rules."""
    return InMemoryRuleStore(
        simple_rules={
            "f1": marker_rule(
                "mcp_radio_on",
                "radio_on",
                args={"parameters": "streamUrl: string - URL\nvolume: number(0-100)? - Vol"},
            ),
            "f2": marker_rule("mcp_disabled", "disabled_cmd", enabled=False),
            "f3": {"name": "Morning", "trigger": {"id": "homey:manager:time:time_exactly"}},
        },
        composite_rules={
            "a1": {
                "name": "Scenes",
                "cards": {
                    "c1": {"id": "ai_tool_call", "type": "trigger", "args": {"command": "scene_a"}},
                    "c2": {"id": "ai_tool_call", "type": "trigger", "args": {"command": "scene_b"}},
                },
            }
        },
    )


@pytest.fixture
def manager(store: InMemoryRuleStore) -> FlowManager:
    """Flow manager over the fixture store."""
    return FlowManager(store)


class TestDiscovery:
    """Test discover_flows and tool compilation."""

    @pytest.mark.asyncio
    async def test_discovers_enabled_marker_flows(self, manager: FlowManager) -> None:
        """Test disabled and non-marker rules are excluded."""
        flows = await manager.discover_flows()
        assert [f.command for f in flows] == ["radio_on", "scene_a", "scene_b"]

    @pytest.mark.asyncio
    async def test_discovery_registers_known_commands(self, manager: FlowManager) -> None:
        """Test discovered commands become known."""
        await manager.discover_flows()
        assert manager.known_commands.names() == ["radio_on", "scene_a", "scene_b"]

    @pytest.mark.asyncio
    async def test_composite_wins_on_id_clash(self) -> None:
        """Test a composite rule replaces a simple rule with the same id."""
        store = InMemoryRuleStore(
            simple_rules={"x": marker_rule("simple", "from_simple")},
            composite_rules={
                "x": {
                    "name": "composite",
                    "cards": [{"id": "ai_tool_call", "type": "trigger", "args": {"command": "from_composite"}}],
                }
            },
        )
        flows = await FlowManager(store).discover_flows()
        assert [f.command for f in flows] == ["from_composite"]

    @pytest.mark.asyncio
    async def test_store_failure_returns_empty(self) -> None:
        """Test a failing store yields an empty discovery instead of raising."""
        store = AsyncMock()
        store.get_simple_rules.side_effect = RuleStoreError("hub offline")
        assert await FlowManager(store).discover_flows() == []

    @pytest.mark.asyncio
    async def test_one_bad_rule_does_not_abort_scan(self, store: InMemoryRuleStore) -> None:
        """Test malformed records are skipped and the rest still compile."""
        store.simple_rules["bad"] = {"name": "bad", "trigger": "nonsense"}
        flows = await FlowManager(store).discover_flows()
        assert "radio_on" in [f.command for f in flows]

    @pytest.mark.asyncio
    async def test_get_tools_from_flows_populates_order_cache(self, manager: FlowManager) -> None:
        """Test compiled tools carry the schema and cache the order."""
        tools = await manager.get_tools_from_flows()

        radio = next(t for t in tools if t.name == "radio_on")
        assert radio.input_schema["required"] == ["streamUrl"]
        assert manager.order_cache.get("radio_on") == ["streamUrl", "volume"]
        assert manager.order_cache.get("scene_a") == []

    @pytest.mark.asyncio
    async def test_rescans_without_ttl(self, manager: FlowManager, store: InMemoryRuleStore) -> None:
        """Test every discovery sees store changes when caching is off."""
        await manager.discover_flows()
        store.simple_rules["f4"] = marker_rule("mcp_new", "new_cmd")
        assert "new_cmd" in [f.command for f in await manager.discover_flows()]

    @pytest.mark.asyncio
    async def test_ttl_cache_reuses_result(self, store: InMemoryRuleStore) -> None:
        """Test a TTL cache serves repeated discoveries until invalidated."""
        manager = FlowManager(store, cache_ttl_seconds=60)
        await manager.discover_flows()
        store.simple_rules["f4"] = marker_rule("mcp_new", "new_cmd")

        assert "new_cmd" not in [f.command for f in await manager.discover_flows()]
        manager.invalidate_cache()
        assert "new_cmd" in [f.command for f in await manager.discover_flows()]

    @pytest.mark.asyncio
    async def test_ttl_cache_expires(self, store: InMemoryRuleStore) -> None:
        """Test cached discoveries expire after the TTL."""
        manager = FlowManager(store, cache_ttl_seconds=5)
        await manager.discover_flows()
        store.simple_rules["f4"] = marker_rule("mcp_new", "new_cmd")
        manager._cached_at -= 10

        flows = await manager.discover_flows()
        assert "new_cmd" in [f.command for f in flows]


class TestCommandsAndInvocation:
    """Test known-command tools and triggering."""

    @pytest.mark.asyncio
    async def test_trigger_uses_compiled_order(
        self, manager: FlowManager, store: InMemoryRuleStore
    ) -> None:
        """Test triggering after compilation maps by declared position."""
        await manager.get_tools_from_flows()
        result = await manager.trigger_command("radio_on", {"volume": 42})

        assert result.success
        tokens, _ = store.fired[-1]
        assert tokens.value1 == ""
        assert tokens.value2 == "42"

    @pytest.mark.asyncio
    async def test_tools_from_commands_includes_called_commands(self, manager: FlowManager) -> None:
        """Test commands triggered before discovery appear in the fallback catalog."""
        await manager.trigger_command("adhoc", {})
        tools = manager.get_tools_from_commands()

        assert [t.name for t in tools] == ["adhoc"]
        assert tools[0].description == "Trigger the 'adhoc' command in hub flows"
        assert tools[0].input_schema["properties"] == {}


class TestNamingLookups:
    """Test prefix-based flow lookups."""

    @pytest.mark.asyncio
    async def test_get_prefixed_flows(self, manager: FlowManager) -> None:
        """Test only simple rules with the prefix are returned."""
        names = [rule.name for rule in await manager.get_prefixed_flows()]
        assert names == ["mcp_radio_on", "mcp_disabled"]

    @pytest.mark.asyncio
    async def test_get_flow_by_tool_name(self, manager: FlowManager) -> None:
        """Test tool names resolve through the naming convention."""
        rule = await manager.get_flow_by_tool_name("radio_on")
        assert rule is not None
        assert rule.id == "f1"
        assert await manager.get_flow_by_tool_name("missing") is None


class TestFlowOverview:
    """Test get_flow_overview."""

    @pytest.mark.asyncio
    async def test_overview_excludes_disabled_by_default(self, manager: FlowManager) -> None:
        """Test default overview summary counts."""
        overview = await manager.get_flow_overview()

        assert [item.name for item in overview.flows] == ["mcp_radio_on", "Morning", "Scenes"]
        summary = overview.summary
        assert (summary.total, summary.enabled, summary.disabled) == (3, 3, 0)
        assert (summary.regular, summary.advanced, summary.ai_flows) == (2, 1, 2)

    @pytest.mark.asyncio
    async def test_overview_with_disabled(self, manager: FlowManager) -> None:
        """Test include_disabled adds disabled rules with their command."""
        overview = await manager.get_flow_overview(include_disabled=True)

        disabled = next(item for item in overview.flows if item.id == "f2")
        assert disabled.enabled is False
        assert disabled.command == "disabled_cmd"
        assert overview.summary.disabled == 1
        assert overview.summary.total == 4

    @pytest.mark.asyncio
    async def test_overview_composite_details(self, manager: FlowManager) -> None:
        """Test composite rules report type, first command and card count."""
        overview = await manager.get_flow_overview()
        scenes = next(item for item in overview.flows if item.id == "a1")
        assert scenes.type == "advanced"
        assert scenes.command == "scene_a"
        assert scenes.card_count == 2


class TestMalformedRules:
    """Test discovery stays fail-safe with oddly shaped rules."""

    @pytest.mark.asyncio
    async def test_non_string_store_key(self) -> None:
        """Test an integer store key is used as a string id."""
        store = InMemoryRuleStore(
            simple_rules={
                1: marker_rule("mcp_radio", "radio"),  # type: ignore[dict-item]
                "good": marker_rule("mcp_lights", "lights"),
            }
        )
        flows = await FlowManager(store).discover_flows()

        assert [f.command for f in flows] == ["radio", "lights"]
        assert flows[0].flow_id == "1"

    @pytest.mark.asyncio
    async def test_scan_failure_skips_only_that_rule(self, store: InMemoryRuleStore) -> None:
        """Test an exception while scanning one rule does not abort discovery."""

        class BrokenScanner(FlowScanner):
            def scan(self, raw, rule_id=None):
                if rule_id == "f1":
                    raise ValueError("unexpected shape")
                return super().scan(raw, rule_id)

        flows = await FlowManager(store, scanner=BrokenScanner()).discover_flows()
        assert [f.command for f in flows] == ["scene_a", "scene_b"]

    @pytest.mark.asyncio
    async def test_null_name_keeps_rule(self) -> None:
        """Test a rule whose name is null is still discovered."""
        store = InMemoryRuleStore(simple_rules={"f1": marker_rule(None, "radio")})  # type: ignore[arg-type]
        flows = await FlowManager(store).discover_flows()

        assert [f.command for f in flows] == ["radio"]
        assert flows[0].flow_name == ""
