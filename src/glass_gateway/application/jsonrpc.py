"""JSON-RPC 2.0 envelopes and reserved error codes."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

JSONRPC_VERSION = "2.0"

RequestId = str | int | None


class JsonRpcErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    AUTHENTICATION_REQUIRED = -32001
    INVALID_TOKEN = -32002


AUTHENTICATION_REQUIRED_MESSAGE = (
    "Authentication required: send 'Authorization: Bearer <token>' or a 'token' query parameter."
)
INVALID_TOKEN_MESSAGE = "Invalid token."


def result_envelope(request_id: RequestId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_envelope(request_id: RequestId, code: JsonRpcErrorCode, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": int(code), "message": message},
    }


def request_id_of(message: object) -> RequestId:
    """Return the ``id`` of ``message`` when it is usable as a JSON-RPC id."""
    if not isinstance(message, dict):
        return None
    value = message.get("id")
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return value


__all__ = [
    "AUTHENTICATION_REQUIRED_MESSAGE",
    "INVALID_TOKEN_MESSAGE",
    "JSONRPC_VERSION",
    "JsonRpcErrorCode",
    "RequestId",
    "error_envelope",
    "request_id_of",
    "result_envelope",
]
