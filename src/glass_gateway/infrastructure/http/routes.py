"""HTTP route definitions for the MCP endpoint, health and discovery."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from glass_gateway.application.gateway import McpGateway
from glass_gateway.application.jsonrpc import JsonRpcErrorCode, error_envelope

logger = logging.getLogger("glass_gateway.http")

MCP_PATH = "/mcp"
SESSION_HEADER = "Mcp-Session-Id"
EVENT_STREAM = "text/event-stream"

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

DISCOVERY_NOT_SUPPORTED = {
    "error": "not_supported",
    "error_description": (
        "This server does not support OAuth discovery. "
        "Authenticate with a Bearer token or the ?token= query parameter."
    ),
}


@dataclass(frozen=True)
class McpRouteDeps:
    gateway: McpGateway
    heartbeat_seconds: float = 15.0


def extract_credential(request: Request) -> str | None:
    """Bearer header first, then the ``token`` query parameter."""
    header = request.headers.get("authorization")
    if header:
        scheme, _, value = header.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    token = request.query_params.get("token")
    return token or None


def accepts_event_stream(request: Request) -> bool:
    return EVENT_STREAM in request.headers.get("accept", "").lower()


def format_sse_message(payload: dict[str, Any]) -> str:
    return f"event: message\ndata: {json.dumps(payload, separators=(',', ':'))}\n\n"


async def heartbeat_stream(
    interval: float,
    *,
    sleep: Callable[[float], Any] = asyncio.sleep,
) -> AsyncIterator[str]:
    """Emit SSE comment pings until the client goes away."""
    while True:
        yield ": ping\n\n"
        await sleep(interval)


def add_mcp_routes(app: FastAPI, dependency_provider: Callable[[], McpRouteDeps]) -> None:
    def get_dependencies() -> McpRouteDeps:
        return dependency_provider()

    @app.post(MCP_PATH, description="Handle one MCP JSON-RPC message.")
    async def mcp_post(
        request: Request,
        deps: McpRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> Response:
        gateway = deps.gateway
        auth = gateway.authenticate(extract_credential(request))
        if auth.identity is None:
            return JSONResponse(auth.error, status_code=200)
        identity = auth.identity

        try:
            message = json.loads(await request.body())
        except (UnicodeDecodeError, json.JSONDecodeError):
            return JSONResponse(
                error_envelope(None, JsonRpcErrorCode.PARSE_ERROR, "Parse error"),
                status_code=200,
            )

        session = gateway.bind_session(request.headers.get(SESSION_HEADER), identity)
        headers = {SESSION_HEADER: session.session_id}

        reply = await gateway.dispatch(message, identity)
        if reply is None:
            return Response(status_code=202, headers=headers)
        if accepts_event_stream(request):
            return Response(
                content=format_sse_message(reply),
                media_type=EVENT_STREAM,
                headers={**headers, **_SSE_HEADERS},
            )
        return JSONResponse(reply, headers=headers)

    @app.get(MCP_PATH, description="Open a server-to-client event stream.")
    async def mcp_stream(
        request: Request,
        deps: McpRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> Response:
        gateway = deps.gateway
        auth = gateway.authenticate(extract_credential(request))
        if auth.identity is None:
            return JSONResponse(auth.error, status_code=200)
        if not accepts_event_stream(request):
            return JSONResponse(
                {"error": f"Not Acceptable: client must accept {EVENT_STREAM}"},
                status_code=406,
            )
        # Streams never create protocol sessions; only an owned id is echoed.
        session = gateway.lookup_session(request.headers.get(SESSION_HEADER), auth.identity)
        session_id = session.session_id if session is not None else None
        logger.info(
            "event stream opened",
            extra={"data": {"identity": auth.identity, "session_id": session_id}},
        )
        headers = dict(_SSE_HEADERS)
        if session_id is not None:
            headers[SESSION_HEADER] = session_id
        return StreamingResponse(
            heartbeat_stream(deps.heartbeat_seconds),
            media_type=EVENT_STREAM,
            headers=headers,
        )

    @app.delete(MCP_PATH, description="Terminate a protocol session.")
    async def mcp_delete(
        request: Request,
        deps: McpRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> Response:
        gateway = deps.gateway
        auth = gateway.authenticate(extract_credential(request))
        if auth.identity is None:
            return JSONResponse(auth.error, status_code=200)
        session_id = request.headers.get(SESSION_HEADER)
        if not session_id:
            return JSONResponse({"error": f"Missing {SESSION_HEADER} header"}, status_code=400)
        if not gateway.terminate_session(session_id, auth.identity):
            return JSONResponse({"error": "Session not found"}, status_code=404)
        return Response(status_code=204)


def add_health_routes(app: FastAPI, dependency_provider: Callable[[], McpRouteDeps]) -> None:
    def get_dependencies() -> McpRouteDeps:
        return dependency_provider()

    @app.get("/health", description="Liveness plus connection counts.")
    def health(deps: McpRouteDeps = Depends(get_dependencies)) -> dict[str, Any]:  # noqa: B008
        return deps.gateway.health()

    @app.get("/.well-known/oauth-authorization-server", include_in_schema=False)
    def oauth_authorization_server() -> JSONResponse:
        return JSONResponse(DISCOVERY_NOT_SUPPORTED, status_code=404)

    @app.get("/.well-known/oauth-protected-resource", include_in_schema=False)
    def oauth_protected_resource() -> JSONResponse:
        return JSONResponse(DISCOVERY_NOT_SUPPORTED, status_code=404)


__all__ = [
    "McpRouteDeps",
    "add_health_routes",
    "add_mcp_routes",
    "extract_credential",
    "format_sse_message",
    "heartbeat_stream",
]
