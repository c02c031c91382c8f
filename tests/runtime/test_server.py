from __future__ import annotations

from fastapi.testclient import TestClient

from glass_gateway.runtime.bootstrap import build_runtime
from glass_gateway.runtime.settings import Settings, TokenSettings
from glass_gateway.server import create_app


def _runtime(tmp_path):
    tokens = TokenSettings.model_validate(
        {
            "TOKEN_BACKEND": "memory",
            "LEGACY_TOKEN_FILE": str(tmp_path / "tokens.json"),
            "USER_TOKENS": {"tok-a": "alice"},
        }
    )
    return build_runtime(Settings.model_validate({"tokens": tokens}))


def test_app_serves_health_and_mcp(tmp_path, device_factory) -> None:
    runtime = _runtime(tmp_path)
    runtime.hardware_adapter.on_session(device_factory(), "conn-1", "alice")

    with TestClient(create_app(runtime)) as client:
        health = client.get("/health")
        listed = client.post(
            "/mcp",
            json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"},
            headers={"Authorization": "Bearer tok-a"},
        )

    assert health.json() == {"ok": True, "connectedGlasses": 1, "activeMcpSessions": 0}
    assert len(listed.json()["result"]["tools"]) == 6


def test_shutdown_closes_device_sessions(tmp_path, device_factory) -> None:
    runtime = _runtime(tmp_path)
    record = runtime.hardware_adapter.on_session(device_factory(), "conn-1", "alice")

    with TestClient(create_app(runtime)):
        pass

    assert record.closed
    assert runtime.directory.get_connected_count() == 0

