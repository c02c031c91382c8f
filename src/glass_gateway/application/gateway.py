"""Identity-scoped MCP method dispatch."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from glass_gateway.application.jsonrpc import (
    AUTHENTICATION_REQUIRED_MESSAGE,
    INVALID_TOKEN_MESSAGE,
    JsonRpcErrorCode,
    error_envelope,
    request_id_of,
    result_envelope,
)
from glass_gateway.application.protocol_session_manager import ProtocolSessionManager
from glass_gateway.application.session_directory import SessionDirectory
from glass_gateway.application.token_registry import TokenRegistry
from glass_gateway.domain.identity import WILDCARD_IDENTITY
from glass_gateway.domain.protocol_session import ProtocolSession
from glass_gateway.tools.registry import ToolExecutor, ToolRegistry

logger = logging.getLogger("glass_gateway.gateway")

PROTOCOL_VERSION = "2025-03-26"


@dataclass(frozen=True, slots=True)
class ServerInfo:
    name: str = "mentra-glass-mcp"
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class AuthOutcome:
    """Result of authenticating a credential: an identity or a JSON-RPC error."""

    identity: str | None
    error: dict[str, Any] | None = None


def _same_secret(presented: str, expected: str) -> bool:
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


class McpGateway:
    """Authenticates callers, binds protocol sessions and dispatches JSON-RPC methods.

    Tool calls always run with the identity resolved from the credential.
    Nothing in ``params`` can change who the call acts for.
    """

    def __init__(
        self,
        *,
        tokens: TokenRegistry,
        protocol_sessions: ProtocolSessionManager,
        directory: SessionDirectory,
        tool_registry: ToolRegistry,
        tool_executor: ToolExecutor,
        admin_token: str | None = None,
        server_info: ServerInfo | None = None,
    ) -> None:
        self._tokens = tokens
        self._protocol_sessions = protocol_sessions
        self._directory = directory
        self._tool_registry = tool_registry
        self._tool_executor = tool_executor
        self._admin_token = admin_token or None
        self._server_info = server_info or ServerInfo()

    # ------------------------------------------------------------------
    # authentication and sessions

    def authenticate(self, credential: str | None) -> AuthOutcome:
        if not credential:
            return AuthOutcome(
                identity=None,
                error=error_envelope(
                    None, JsonRpcErrorCode.AUTHENTICATION_REQUIRED, AUTHENTICATION_REQUIRED_MESSAGE
                ),
            )
        if self._admin_token is not None and _same_secret(credential, self._admin_token):
            return AuthOutcome(identity=WILDCARD_IDENTITY)
        identity = self._tokens.resolve_identity(credential)
        if identity is None:
            logger.info("rejected unknown credential")
            return AuthOutcome(
                identity=None,
                error=error_envelope(None, JsonRpcErrorCode.INVALID_TOKEN, INVALID_TOKEN_MESSAGE),
            )
        return AuthOutcome(identity=identity)

    def bind_session(self, presented_id: str | None, identity: str) -> ProtocolSession:
        return self._protocol_sessions.bind(presented_id, identity)

    def lookup_session(self, presented_id: str | None, identity: str) -> ProtocolSession | None:
        return self._protocol_sessions.lookup(presented_id, identity)

    def terminate_session(self, session_id: str, identity: str) -> bool:
        return self._protocol_sessions.terminate(session_id, identity)

    def health(self) -> dict[str, Any]:
        return {
            "ok": True,
            "connectedGlasses": self._directory.get_connected_count(),
            "activeMcpSessions": self._protocol_sessions.active_count(),
        }

    # ------------------------------------------------------------------
    # dispatch

    async def dispatch(self, message: object, identity: str) -> dict[str, Any] | None:
        """Handle one JSON-RPC message; ``None`` means the message needs no response."""
        request_id = request_id_of(message)
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            return error_envelope(request_id, JsonRpcErrorCode.INVALID_REQUEST, "Invalid Request")

        method: str = message["method"]
        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return error_envelope(request_id, JsonRpcErrorCode.INVALID_PARAMS, "params must be an object")

        if method.startswith("notifications/"):
            return None

        match method:
            case "initialize":
                return result_envelope(request_id, self._initialize_result())
            case "ping":
                return result_envelope(request_id, {})
            case "tools/list":
                return result_envelope(request_id, {"tools": self._tool_registry.catalog()})
            case "tools/call":
                return await self._call_tool(request_id, params, identity)
            case _:
                logger.info("unknown method", extra={"data": {"method": method, "identity": identity}})
                return error_envelope(
                    request_id, JsonRpcErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}"
                )

    def _initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": self._server_info.name, "version": self._server_info.version},
        }

    async def _call_tool(
        self, request_id: Any, params: Mapping[str, Any], identity: str
    ) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return error_envelope(request_id, JsonRpcErrorCode.INVALID_PARAMS, "tools/call requires a tool name")
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            return error_envelope(
                request_id, JsonRpcErrorCode.INVALID_PARAMS, "tools/call arguments must be an object"
            )
        result = await self._tool_executor.execute(name, arguments, identity)
        return result_envelope(request_id, result.to_payload())


__all__ = ["AuthOutcome", "McpGateway", "PROTOCOL_VERSION", "ServerInfo"]
