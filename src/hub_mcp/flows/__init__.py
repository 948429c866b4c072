"""Discovery and invocation of AI-callable hub flows.

This module provides:
- Parameter DSL parser (free text -> typed parameter schema)
- Flow scanner (finds marker-triggered rules)
- Tool compiler (flow records -> tool definitions)
- Token mapper (named arguments -> positional trigger tokens)
- Rule store collaborators and the FlowManager that ties them together
"""

from hub_mcp.flows.cache import KnownCommands, ParameterOrderCache
from hub_mcp.flows.compiler import ToolCompiler
from hub_mcp.flows.dsl import parse_parameters
from hub_mcp.flows.http_store import HttpRuleStore
from hub_mcp.flows.manager import FlowManager, FlowOverview
from hub_mcp.flows.mapper import TokenMapper
from hub_mcp.flows.naming import flow_name_from_tool, tool_name_from_flow
from hub_mcp.flows.scanner import FlowScanner
from hub_mcp.flows.store import InMemoryRuleStore, RuleStore, RuleStoreError
from hub_mcp.flows.types import (
    ExecutionResult,
    FlowRecord,
    ParsedParameters,
    PropertySchema,
    RuleRecord,
    TokenSet,
)

__all__ = [
    "ExecutionResult",
    "FlowManager",
    "FlowOverview",
    "FlowRecord",
    "FlowScanner",
    "HttpRuleStore",
    "InMemoryRuleStore",
    "KnownCommands",
    "ParameterOrderCache",
    "ParsedParameters",
    "PropertySchema",
    "RuleRecord",
    "RuleStore",
    "RuleStoreError",
    "TokenMapper",
    "TokenSet",
    "ToolCompiler",
    "flow_name_from_tool",
    "parse_parameters",
    "tool_name_from_flow",
]
