"""Tests for the built-in flow tools."""

import json

import pytest

from hub_mcp.flows.manager import FlowManager
from hub_mcp.flows.store import InMemoryRuleStore
from hub_mcp.tools import ToolRegistry, ToolTier, register_builtin_tools


@pytest.fixture
def store() -> InMemoryRuleStore:
    """Store with one parameterized AI flow and one disabled rule."""
    return InMemoryRuleStore(
        simple_rules={
            "f1": {
                "name": "mcp_radio_on",
                "trigger": {
                    "id": "ai_tool_call",
                    "args": {
                        "command": "radio_on",
                        "description": "Start the radio",
                        "parameters": "station: string(npo1|npo2) - Station\nvolume: number(0-100)? - Volume",
                    },
                },
            },
            "f2": {"name": "Old", "enabled": False, "trigger": {"id": "other"}},
        }
    )


@pytest.fixture
def registry(store: InMemoryRuleStore) -> ToolRegistry:
    """Registry with the built-in tools over the fixture store."""
    registry = ToolRegistry()
    register_builtin_tools(registry, FlowManager(store))
    return registry


def test_builtin_tiers(registry: ToolRegistry) -> None:
    """Test the built-in tools are registered at their tiers."""
    tiers = {tool.name: tool.tier for tool in registry.list_tools()}
    assert tiers == {
        "get_flow_overview": ToolTier.CORE,
        "search_tools": ToolTier.META,
        "use_tool": ToolTier.META,
        "trigger_any_flow": ToolTier.HIDDEN,
        "refresh_flows": ToolTier.HIDDEN,
        "list_known_commands": ToolTier.HIDDEN,
    }


def test_registering_twice_fails(registry: ToolRegistry, store: InMemoryRuleStore) -> None:
    """Test built-ins cannot be registered twice on one registry."""
    with pytest.raises(ValueError, match="already registered"):
        register_builtin_tools(registry, FlowManager(store))


@pytest.mark.asyncio
async def test_trigger_any_flow(registry: ToolRegistry, store: InMemoryRuleStore) -> None:
    """Test trigger_any_flow fires the marker trigger with mapped tokens."""
    await registry.execute("refresh_flows")
    result = await registry.execute(
        "trigger_any_flow", {"command": "radio_on", "parameters": {"volume": 30, "station": "npo1"}}
    )

    assert not result.is_error
    assert result.first_text.startswith("Successfully triggered flow: radio_on")
    tokens, state = store.fired[-1]
    assert state == {"command": "radio_on"}
    assert tokens.slots() == ["npo1", "30", "", "", ""]


@pytest.mark.asyncio
async def test_trigger_any_flow_requires_command(registry: ToolRegistry) -> None:
    """Test a missing command is reported as a tool error."""
    result = await registry.execute("trigger_any_flow", {"parameters": {}})
    assert result.is_error
    assert "command" in result.first_text


@pytest.mark.asyncio
async def test_trigger_any_flow_rejects_non_object_parameters(registry: ToolRegistry) -> None:
    """Test parameters must be an object."""
    result = await registry.execute("trigger_any_flow", {"command": "x", "parameters": [1]})
    assert result.is_error
    assert "'parameters' must be an object" in result.first_text


@pytest.mark.asyncio
async def test_trigger_any_flow_reports_failure() -> None:
    """Test a failing store surfaces as an error result."""

    class FailingStore(InMemoryRuleStore):
        async def fire_trigger(self, tokens, state) -> None:
            raise RuntimeError("hub offline")

    registry = ToolRegistry()
    register_builtin_tools(registry, FlowManager(FailingStore()))
    result = await registry.execute("trigger_any_flow", {"command": "x"})

    assert result.is_error
    assert "Failed to trigger flow: x" in result.first_text
    assert "hub offline" in result.first_text


@pytest.mark.asyncio
async def test_refresh_flows_detects_changes(registry: ToolRegistry, store: InMemoryRuleStore) -> None:
    """Test the first refresh reports changes, the second does not."""
    first = await registry.execute("refresh_flows")
    second = await registry.execute("refresh_flows")

    assert "Found 1 flow(s)" in first.first_text
    assert "Changes detected" in first.first_text
    assert "No changes detected" in second.first_text
    assert "1. radio_on" in first.first_text
    assert "- station: string (required) - Station [npo1|npo2]" in first.first_text
    assert "- volume: number (optional) - Volume [0.0-100.0]" in first.first_text

    store.simple_rules["f3"] = {
        "name": "mcp_new",
        "trigger": {"id": "ai_tool_call", "args": {"command": "new_cmd"}},
    }
    third = await registry.execute("refresh_flows")
    assert "Changes detected" in third.first_text


@pytest.mark.asyncio
async def test_list_known_commands(registry: ToolRegistry) -> None:
    """Test known commands include discovered and triggered commands."""
    await registry.execute("refresh_flows")
    await registry.execute("trigger_any_flow", {"command": "adhoc"})

    result = await registry.execute("list_known_commands")
    payload = json.loads(result.first_text)

    assert payload == {"commands": ["radio_on", "adhoc"], "count": 2}


@pytest.mark.asyncio
async def test_get_flow_overview(registry: ToolRegistry) -> None:
    """Test the overview tool returns JSON with a summary."""
    result = await registry.execute("get_flow_overview", {})
    payload = json.loads(result.first_text)

    assert payload["summary"]["total"] == 1
    assert payload["summary"]["ai_flows"] == 1
    assert payload["flows"][0]["command"] == "radio_on"

    with_disabled = json.loads(
        (await registry.execute("get_flow_overview", {"include_disabled": True})).first_text
    )
    assert with_disabled["summary"]["disabled"] == 1
