"""Tests for configuration settings."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from hub_mcp.config import (
    AppConfig,
    ConfigError,
    Environment,
    get_environment,
    get_settings,
    reset_settings,
)
from hub_mcp.config.env_loader import load_env_files
from hub_mcp.flows.http_store import HttpRuleStore
from hub_mcp.flows.store import InMemoryRuleStore
from hub_mcp.mcp.server import create_mcp_server, create_rule_store


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove variables that would leak into AppConfig."""
    for name in (
        "APP_ENV",
        "APP_DEBUG",
        "APP_LOG_LEVEL",
        "APP_LOG_FORMAT",
        "HUB_MCP_RULE_STORE_BACKEND",
        "HUB_MCP_RULES_FILE",
        "HUB_MCP_FLOW_NAME_PREFIX",
        "HUB_MCP_SERVICE_PORT",
        "HUB_MCP_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


class TestEnvironmentDetection:
    """Test environment detection."""

    def test_get_environment_default(self) -> None:
        """Test default environment is development."""
        assert get_environment() == Environment.DEVELOPMENT

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("production", Environment.PRODUCTION),
            ("prod", Environment.PRODUCTION),
            ("staging", Environment.STAGING),
            ("stage", Environment.STAGING),
            ("TEST", Environment.TEST),
            ("something-else", Environment.DEVELOPMENT),
        ],
    )
    def test_get_environment_aliases(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: Environment
    ) -> None:
        """Test APP_ENV values and their aliases."""
        monkeypatch.setenv("APP_ENV", value)
        assert get_environment() == expected


class TestAppConfig:
    """Test AppConfig defaults, overrides and validation."""

    def test_defaults(self) -> None:
        """Test AppConfig has correct code defaults."""
        config = AppConfig()

        assert config.environment == Environment.DEVELOPMENT
        assert config.debug is False
        assert config.log_level == "INFO"
        assert config.log_format == "console"
        assert config.log_dir is None
        assert config.service_port == 3000
        assert config.protocol_version == "2025-06-18"
        assert config.server_name == "hub-mcp-server"
        assert config.flow_name_prefix == "mcp_"
        assert config.rule_store_backend == "memory"
        assert config.rules_file is None
        assert config.discovery_cache_ttl_seconds == 0.0

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test HUB_MCP_ variables and APP_ aliases are read."""
        monkeypatch.setenv("APP_DEBUG", "1")
        monkeypatch.setenv("APP_LOG_LEVEL", "debug")
        monkeypatch.setenv("HUB_MCP_SERVICE_PORT", "8123")
        monkeypatch.setenv("HUB_MCP_FLOW_NAME_PREFIX", "AI_")
        monkeypatch.setenv("HUB_MCP_RULE_STORE_BACKEND", " HTTP ")

        config = AppConfig()

        assert config.debug is True
        assert config.log_level == "DEBUG"
        assert config.service_port == 8123
        assert config.flow_name_prefix == "ai_"
        assert config.rule_store_backend == "http"

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test log level validation."""
        monkeypatch.setenv("APP_LOG_LEVEL", "INVALID")
        with pytest.raises(ValidationError):
            AppConfig()

    def test_invalid_log_format(self) -> None:
        """Test log format validation."""
        with pytest.raises(ValidationError):
            AppConfig(log_format="xml")

    def test_invalid_backend(self) -> None:
        """Test unknown rule store backends are rejected."""
        with pytest.raises(ValidationError, match="rule_store_backend"):
            AppConfig(rule_store_backend="sqlite")

    def test_invalid_prefix(self) -> None:
        """Test an empty or spaced prefix is rejected."""
        with pytest.raises(ValidationError, match="flow_name_prefix"):
            AppConfig(flow_name_prefix="")
        with pytest.raises(ValidationError, match="flow_name_prefix"):
            AppConfig(flow_name_prefix="my prefix")

    def test_cache_ttl_bounds(self) -> None:
        """Test the discovery cache TTL is bounded."""
        assert AppConfig(discovery_cache_ttl_seconds=300).discovery_cache_ttl_seconds == 300
        with pytest.raises(ValidationError):
            AppConfig(discovery_cache_ttl_seconds=-1)
        with pytest.raises(ValidationError):
            AppConfig(discovery_cache_ttl_seconds=301)

    def test_path_resolution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that relative paths are resolved to absolute."""
        monkeypatch.chdir(tmp_path)
        config = AppConfig(rules_file="rules.yaml", log_dir="logs")

        assert config.rules_file == (tmp_path / "rules.yaml").resolve()
        assert config.log_dir is not None
        assert config.log_dir.is_absolute()

    def test_marker_trigger_full_id(self) -> None:
        """Test the fully-qualified marker id follows the app id."""
        config = AppConfig(marker_app_id="com.example.ai")
        assert config.marker_trigger_full_id == "homey:app:com.example.ai:ai_tool_call"


class TestSingleton:
    """Test singleton pattern."""

    def test_get_settings_returns_singleton(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that get_settings returns the same instance until reset."""
        monkeypatch.chdir(tmp_path)
        reset_settings()
        try:
            settings1 = get_settings()
            settings2 = get_settings()
            assert settings1 is settings2

            reset_settings()
            assert get_settings() is not settings1
        finally:
            reset_settings()


class TestEnvFileLoading:
    """Test .env file loading."""

    def test_load_env_files_priority(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the most specific .env file wins."""
        (tmp_path / ".env").write_text("HUB_MCP_TEST_VAR=base\n")
        (tmp_path / ".env.local").write_text("HUB_MCP_TEST_VAR=local\n")
        (tmp_path / ".env.development").write_text("HUB_MCP_TEST_VAR=development\n")
        (tmp_path / ".env.development.local").write_text(
            "HUB_MCP_TEST_VAR=development_local\n"
        )
        monkeypatch.setenv("APP_ENV", "development")
        monkeypatch.delenv("HUB_MCP_TEST_VAR", raising=False)

        try:
            loaded = load_env_files(tmp_path)
            assert loaded[0] == ".env.development.local"
            assert len(loaded) == 4

            assert os.environ["HUB_MCP_TEST_VAR"] == "development_local"
        finally:
            os.environ.pop("HUB_MCP_TEST_VAR", None)

    def test_explicit_env_wins_over_files(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test variables already in the environment are not overridden."""
        (tmp_path / ".env").write_text("HUB_MCP_TEST_VAR=from_file\n")
        monkeypatch.setenv("HUB_MCP_TEST_VAR", "explicit")

        load_env_files(tmp_path)

        assert os.environ["HUB_MCP_TEST_VAR"] == "explicit"

    def test_no_env_files(self, tmp_path: Path) -> None:
        """Test an empty directory loads nothing."""
        assert load_env_files(tmp_path) == []


class TestRuleStoreFactory:
    """Test building rule stores and servers from settings."""

    def test_memory_backend(self) -> None:
        """Test the default backend is an empty in-memory store."""
        store = create_rule_store(AppConfig())
        assert isinstance(store, InMemoryRuleStore)
        assert store.simple_rules == {}

    def test_file_backend(self, tmp_path: Path) -> None:
        """Test the file backend loads rules from YAML."""
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text(
            "simple:\n  f1:\n    name: mcp_x\n    trigger: {id: ai_tool_call, args: {command: x}}\n",
            encoding="utf-8",
        )
        store = create_rule_store(
            AppConfig(rule_store_backend="file", rules_file=str(rules_file))
        )
        assert isinstance(store, InMemoryRuleStore)
        assert list(store.simple_rules) == ["f1"]

    def test_file_backend_requires_rules_file(self) -> None:
        """Test the file backend without a path is a ConfigError."""
        with pytest.raises(ConfigError, match="HUB_MCP_RULES_FILE"):
            create_rule_store(AppConfig(rule_store_backend="file"))

    @pytest.mark.asyncio
    async def test_http_backend(self) -> None:
        """Test the http backend builds an HttpRuleStore."""
        store = create_rule_store(
            AppConfig(rule_store_backend="http", hub_trigger_url="http://hub/trigger")
        )
        assert isinstance(store, HttpRuleStore)
        assert store.trigger_url == "http://hub/trigger"
        await store.aclose()

    def test_create_mcp_server_uses_identity(self) -> None:
        """Test the dispatcher reports the configured server identity."""
        dispatcher = create_mcp_server(
            AppConfig(server_name="living-room", server_version="2.0.0"),
            store=InMemoryRuleStore(),
        )
        assert dispatcher.server_name == "living-room"
        assert dispatcher.server_version == "2.0.0"
        assert dispatcher.registry.count() == 6
