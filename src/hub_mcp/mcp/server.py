"""Server wiring: settings -> rule store -> flow manager -> registry -> dispatcher."""

from hub_mcp.config import AppConfig, ConfigError, get_settings
from hub_mcp.flows.http_store import HttpRuleStore
from hub_mcp.flows.manager import FlowManager
from hub_mcp.flows.scanner import FlowScanner
from hub_mcp.flows.store import InMemoryRuleStore, RuleStore
from hub_mcp.mcp.dispatcher import McpDispatcher
from hub_mcp.telemetry import get_logger
from hub_mcp.tools import ToolRegistry, register_builtin_tools

log = get_logger(__name__)


def create_rule_store(settings: AppConfig) -> RuleStore:
    """Build the rule store selected by ``settings.rule_store_backend``.

    Args:
        settings: Application settings.

    Returns:
        A RuleStore implementation.

    Raises:
        ConfigError: If the ``file`` backend is selected without a rules file.
        RuleStoreError: If the rules file cannot be loaded.
    """
    backend = settings.rule_store_backend

    if backend == "file":
        if settings.rules_file is None:
            raise ConfigError("HUB_MCP_RULES_FILE is required when rule_store_backend is 'file'")
        store: RuleStore = InMemoryRuleStore.from_yaml(settings.rules_file)
    elif backend == "http":
        store = HttpRuleStore(
            base_url=settings.hub_base_url,
            api_token=settings.hub_api_token,
            trigger_url=settings.hub_trigger_url,
            timeout=settings.hub_timeout_seconds,
        )
    else:
        store = InMemoryRuleStore()

    log.info("rule_store_created", backend=backend)
    return store


def create_mcp_server(
    settings: AppConfig | None = None,
    store: RuleStore | None = None,
) -> McpDispatcher:
    """Build a fully wired dispatcher.

    Args:
        settings: Application settings (default: :func:`get_settings`).
        store: Rule store override; built from settings when omitted.

    Returns:
        McpDispatcher with the built-in tools registered.
    """
    settings = settings or get_settings()
    store = store if store is not None else create_rule_store(settings)

    flow_manager = FlowManager(
        store,
        scanner=FlowScanner(settings.marker_trigger_full_id),
        flow_prefix=settings.flow_name_prefix,
        cache_ttl_seconds=settings.discovery_cache_ttl_seconds,
    )
    registry = ToolRegistry()
    register_builtin_tools(registry, flow_manager)

    log.info("mcp_server_created", tool_count=registry.count())
    return McpDispatcher(
        registry,
        flow_manager,
        protocol_version=settings.protocol_version,
        server_name=settings.server_name,
        server_version=settings.server_version,
    )
