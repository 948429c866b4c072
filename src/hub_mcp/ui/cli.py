"""CLI interface for the hub MCP server.

This module provides a Typer-based command-line interface for running the
server and inspecting the tool catalog locally.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from hub_mcp.config import ConfigError, get_settings
from hub_mcp.flows.dsl import parse_parameters
from hub_mcp.flows.store import InMemoryRuleStore, RuleStoreError
from hub_mcp.mcp import McpDispatcher, create_mcp_server
from hub_mcp.service.app import create_app
from hub_mcp.tools import ToolTier

app = typer.Typer(help="Hub MCP Server - AI-callable home-automation flows")
console = Console()

RulesOption = typer.Option(
    None, "--rules", "-r", help="YAML rules file to use instead of the configured store"
)


def _build_dispatcher(rules: Optional[Path]) -> McpDispatcher:
    """Build a dispatcher from settings, optionally over a local rules file."""
    try:
        store = InMemoryRuleStore.from_yaml(rules) if rules else None
        return create_mcp_server(store=store)
    except (ConfigError, RuleStoreError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e


@app.command(name="serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)"),
) -> None:
    """Run the HTTP server.

    Examples:
        hub-mcp serve
        hub-mcp serve --port 3001
    """
    settings = get_settings()
    bind_host = host or settings.service_host
    bind_port = port or settings.service_port

    console.print(f"[bold blue]Serving MCP on http://{bind_host}:{bind_port}/mcp[/bold blue]")
    uvicorn.run(create_app(), host=bind_host, port=bind_port, log_level="warning")


@app.command(name="tools")
def tools_command(
    rules: Optional[Path] = RulesOption,
    show_all: bool = typer.Option(False, "--all", "-a", help="Include hidden tools"),
    json_output: bool = typer.Option(False, "--json", help="Output tools/list JSON"),
) -> None:
    """List the tools an agent would see.

    Examples:
        hub-mcp tools --rules rules.yaml
        hub-mcp tools --all
    """
    dispatcher = _build_dispatcher(rules)
    tools = asyncio.run(dispatcher.list_tools())
    if show_all:
        tools = dispatcher.registry.list_tools(ToolTier.HIDDEN) + tools

    if json_output:
        console.print_json(json.dumps({"tools": [tool.to_wire() for tool in tools]}))
        return

    table = Table(title=f"Tools ({len(tools)})")
    table.add_column("Name", style="green")
    table.add_column("Tier", style="blue")
    table.add_column("Parameters", style="cyan")
    table.add_column("Description", style="white", overflow="fold")

    for tool in tools:
        table.add_row(
            tool.name,
            tool.tier.value,
            ", ".join(tool.input_schema.get("properties", {})),
            tool.description,
        )
    console.print(table)


@app.command(name="parse-params")
def parse_params_command(
    text: str = typer.Argument(..., help="Parameter description, one definition per line"),
    json_output: bool = typer.Option(False, "--json", help="Output the input schema as JSON"),
) -> None:
    """Preview how a flow's parameter description is parsed.

    Examples:
        hub-mcp parse-params "volume: number(0-100)? - Volume level"
    """
    # Allow literal "\n" from a shell argument
    parsed = parse_parameters(text.replace("\\n", "\n"))

    if json_output:
        console.print_json(json.dumps(parsed.input_schema()))
        return

    if not parsed.order:
        console.print("[yellow]No parameter definitions found.[/yellow]")
        return

    table = Table(title="Parsed Parameters")
    table.add_column("Token", style="magenta")
    table.add_column("Name", style="green")
    table.add_column("Type", style="blue")
    table.add_column("Required", style="cyan")
    table.add_column("Constraints", style="white")
    table.add_column("Description", style="white", overflow="fold")

    for index, name in enumerate(parsed.order):
        prop = parsed.properties[name]
        constraints = []
        if prop.minimum is not None or prop.maximum is not None:
            constraints.append(f"{prop.minimum}-{prop.maximum}")
        if prop.enum:
            constraints.append("|".join(prop.enum))
        table.add_row(
            f"value{index + 1}" if index < 5 else "[red]dropped[/red]",
            name,
            prop.type,
            "yes" if name in parsed.required else "no",
            " ".join(constraints),
            prop.description,
        )
    console.print(table)


@app.command(name="call")
def call_command(
    name: str = typer.Argument(..., help="Tool name"),
    args: str = typer.Option("{}", "--args", help="Tool arguments as a JSON object"),
    rules: Optional[Path] = RulesOption,
) -> None:
    """Run one tools/call locally and print the result.

    Examples:
        hub-mcp call get_flow_overview --rules rules.yaml
        hub-mcp call radio_on --args '{"volume": 30}' --rules rules.yaml
    """
    try:
        arguments: Any = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: --args is not valid JSON: {e}[/red]")
        raise typer.Exit(1) from e

    dispatcher = _build_dispatcher(rules)
    response = asyncio.run(
        dispatcher.handle(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "tools/call",
                "params": {"name": name, "arguments": arguments},
            }
        )
    )

    if "error" in response:
        console.print(f"[red]Error ({response['error']['code']}): {response['error']['message']}[/red]")
        raise typer.Exit(1)

    result = response["result"]
    for block in result.get("content", []):
        console.print(block.get("text", ""), markup=False)
    if result.get("isError"):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
