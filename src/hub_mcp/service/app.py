"""FastAPI service exposing the MCP dispatcher over HTTP."""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hub_mcp import __version__
from hub_mcp.flows.http_store import HttpRuleStore
from hub_mcp.mcp import McpDispatcher, create_mcp_server
from hub_mcp.mcp.protocol import ErrorCode, error_response
from hub_mcp.security import sanitize_error_message
from hub_mcp.telemetry import (
    MCP_INTERNAL_ERROR,
    SERVICE_READY,
    SERVICE_STARTING,
    SERVICE_STOPPED,
    get_logger,
)

log = get_logger(__name__)

HealthResponse = dict[str, Any]


def create_app(dispatcher: McpDispatcher | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        dispatcher: Pre-built dispatcher. When omitted, one is built from
            settings during startup.

    Returns:
        FastAPI app with ``GET /health`` and ``POST /mcp``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan management."""
        log.info(SERVICE_STARTING)

        if app.state.dispatcher is None:
            app.state.dispatcher = create_mcp_server()

        log.info(SERVICE_READY, tool_count=app.state.dispatcher.registry.count())

        yield

        flow_manager = app.state.dispatcher.flow_manager
        if flow_manager is not None and isinstance(flow_manager.store, HttpRuleStore):
            await flow_manager.store.aclose()

        log.info(SERVICE_STOPPED)

    app = FastAPI(
        title="Hub MCP Server",
        description="MCP tool server for home-automation hub flows",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    @app.get("/health")
    async def health_check() -> HealthResponse:
        """Service health check endpoint."""
        current: McpDispatcher | None = app.state.dispatcher
        return {
            "status": "healthy",
            "server": current.server_name if current else None,
            "components": {
                "dispatcher": "ready" if current else "not_initialized",
                "flows": "enabled" if current and current.flow_manager else "disabled",
            },
        }

    @app.post("/mcp")
    async def mcp_endpoint(request: Request) -> JSONResponse:
        """JSON-RPC 2.0 endpoint for the MCP tool protocol."""
        body = await request.body()
        try:
            message = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JSONResponse(error_response(None, ErrorCode.PARSE_ERROR, "Parse error"))

        if not isinstance(message, dict):
            return JSONResponse(error_response(None, ErrorCode.INVALID_REQUEST, "Invalid Request"))

        try:
            response = await app.state.dispatcher.handle(message)
        except Exception as e:
            log.error(MCP_INTERNAL_ERROR, error=str(e), error_type=type(e).__name__, exc_info=True)
            response = error_response(
                message.get("id"), ErrorCode.INTERNAL_ERROR, sanitize_error_message(e)
            )
        return JSONResponse(response)

    return app
