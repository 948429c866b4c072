"""JSON-RPC 2.0 envelope types for the MCP tool protocol."""

from enum import IntEnum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

RequestId = Union[str, int, float, None]

JSONRPC_VERSION = "2.0"


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JSONRPCRequest(BaseModel):
    """Inbound request (or notification when ``id`` is absent)."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str = Field(..., min_length=1, description="Method name (e.g., 'tools/call')")
    id: RequestId = Field(None, description="Request id, echoed verbatim in the response")
    params: dict[str, Any] | None = Field(None, description="Method parameters")


class JSONRPCError(Exception):
    """Protocol-level failure that is rendered as a JSON-RPC error envelope."""

    def __init__(self, code: ErrorCode, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def success_response(request_id: RequestId, result: Any) -> dict[str, Any]:
    """Build ``{jsonrpc, id, result}``."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(
    request_id: RequestId, code: int, message: str, data: Any = None
) -> dict[str, Any]:
    """Build ``{jsonrpc, id, error: {code, message, data?}}``."""
    error: dict[str, Any] = {"code": int(code), "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}
