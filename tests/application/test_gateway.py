from __future__ import annotations

import pytest

from glass_gateway.application.gateway import PROTOCOL_VERSION
from glass_gateway.application.jsonrpc import JsonRpcErrorCode
from glass_gateway.domain.identity import WILDCARD_IDENTITY

pytestmark = pytest.mark.anyio("asyncio")


def test_missing_credential_requires_authentication(gateway_harness) -> None:
    outcome = gateway_harness.gateway.authenticate(None)

    assert outcome.identity is None
    assert outcome.error["id"] is None
    assert outcome.error["error"]["code"] == JsonRpcErrorCode.AUTHENTICATION_REQUIRED


def test_unknown_credential_is_invalid_token(gateway_harness) -> None:
    outcome = gateway_harness.gateway.authenticate("not-a-real-token")

    assert outcome.identity is None
    assert outcome.error["error"]["code"] == -32002


def test_known_and_admin_credentials_resolve(gateway_harness) -> None:
    gateway = gateway_harness.gateway

    assert gateway.authenticate("alice-token").identity == "alice"
    assert gateway.authenticate("admin-secret").identity == WILDCARD_IDENTITY
    assert gateway.authenticate("admin-secrét").identity is None


async def test_initialize_reports_server_and_tools_capability(gateway_harness) -> None:
    reply = await gateway_harness.gateway.dispatch(
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}, "alice"
    )

    assert reply["id"] == 1
    assert reply["result"]["protocolVersion"] == PROTOCOL_VERSION
    assert reply["result"]["capabilities"] == {"tools": {}}
    assert reply["result"]["serverInfo"] == {"name": "mentra-glass-mcp", "version": "1.0.0"}


async def test_tools_list_returns_catalog(gateway_harness) -> None:
    reply = await gateway_harness.gateway.dispatch({"jsonrpc": "2.0", "id": "a", "method": "tools/list"}, "alice")

    names = [tool["name"] for tool in reply["result"]["tools"]]
    assert "glasses_display_text" in names
    assert len(names) == 6


async def test_tools_call_acts_for_authenticated_identity(gateway_harness, make_record) -> None:
    bob = make_record("bob", "c2")
    gateway_harness.directory.add_session("c2", bob)

    reply = await gateway_harness.gateway.dispatch(
        {
            "jsonrpc": "2.0",
            "id": 7,
            "method": "tools/call",
            "params": {"name": "glasses_display_text", "arguments": {"text": "hi", "userId": "bob"}},
        },
        "alice",
    )

    assert reply["result"]["content"][0]["text"].startswith("Your glasses are not connected.")
    assert bob.handle.shown == []


async def test_unknown_tool_is_reported_in_result(gateway_harness) -> None:
    reply = await gateway_harness.gateway.dispatch(
        {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "nope"}}, "alice"
    )

    assert reply["result"]["isError"] is True
    assert reply["result"]["content"][0]["text"] == "Unknown tool: nope"


async def test_notifications_need_no_response(gateway_harness) -> None:
    reply = await gateway_harness.gateway.dispatch(
        {"jsonrpc": "2.0", "method": "notifications/initialized"}, "alice"
    )

    assert reply is None


async def test_ping_returns_empty_result(gateway_harness) -> None:
    reply = await gateway_harness.gateway.dispatch({"jsonrpc": "2.0", "id": 9, "method": "ping"}, "alice")

    assert reply == {"jsonrpc": "2.0", "id": 9, "result": {}}


@pytest.mark.parametrize(
    ("message", "code"),
    [
        ([{"jsonrpc": "2.0", "id": 1, "method": "ping"}], JsonRpcErrorCode.INVALID_REQUEST),
        ({"jsonrpc": "2.0", "id": 1}, JsonRpcErrorCode.INVALID_REQUEST),
        ({"jsonrpc": "2.0", "id": 1, "method": "resources/list"}, JsonRpcErrorCode.METHOD_NOT_FOUND),
        ({"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {}}, JsonRpcErrorCode.INVALID_PARAMS),
        ({"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": []}, JsonRpcErrorCode.INVALID_PARAMS),
        (
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "x", "arguments": "y"}},
            JsonRpcErrorCode.INVALID_PARAMS,
        ),
    ],
)
async def test_protocol_errors_use_reserved_codes(gateway_harness, message, code) -> None:
    reply = await gateway_harness.gateway.dispatch(message, "alice")

    assert reply["error"]["code"] == code


async def test_health_counts_devices_and_protocol_sessions(gateway_harness, make_record) -> None:
    gateway_harness.directory.add_session("c1", make_record("alice", "c1"))
    gateway_harness.gateway.bind_session(None, "alice")
    gateway_harness.gateway.bind_session(None, "bob")

    assert gateway_harness.gateway.health() == {"ok": True, "connectedGlasses": 1, "activeMcpSessions": 2}
