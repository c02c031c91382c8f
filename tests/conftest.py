from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from glass_gateway.application.gateway import McpGateway
from glass_gateway.application.protocol_session_manager import ProtocolSessionManager
from glass_gateway.application.session_directory import SessionDirectory
from glass_gateway.application.token_registry import TokenRegistry
from glass_gateway.domain.hardware_session import HardwareSessionRecord
from glass_gateway.infrastructure.state.memory_token_store import InMemoryTokenStore
from glass_gateway.infrastructure.state.protocol_session_registry import InMemoryProtocolSessionRegistry
from glass_gateway.tools.catalog import build_tool_registry
from glass_gateway.tools.registry import ToolContext, ToolExecutor


@pytest.fixture
def anyio_backend() -> str:
    # Force AnyIO-managed tests to use asyncio only
    return "asyncio"


class FakeDeviceHandle:
    """Records every device call and exposes the subscribed callbacks."""

    def __init__(self) -> None:
        self.shown: list[tuple[str, int]] = []
        self.cleared = 0
        self.spoken: list[str] = []
        self.transcription_callback: Callable[[str, bool], None] | None = None
        self.button_callback: Callable[[Mapping[str, Any]], None] | None = None
        self.disconnect_callback: Callable[[], None] | None = None

    def show_text(self, text: str, *, duration_ms: int) -> None:
        self.shown.append((text, duration_ms))

    def clear_display(self) -> None:
        self.cleared += 1

    async def speak(self, text: str) -> None:
        self.spoken.append(text)

    def on_transcription(self, callback: Callable[[str, bool], None]) -> None:
        self.transcription_callback = callback

    def on_button_press(self, callback: Callable[[Mapping[str, Any]], None]) -> None:
        self.button_callback = callback

    def on_disconnect(self, callback: Callable[[], None]) -> None:
        self.disconnect_callback = callback


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def make_record(clock: StepClock) -> Callable[..., HardwareSessionRecord]:
    def _make(
        identity: str,
        connection_key: str | None = None,
        *,
        handle: FakeDeviceHandle | None = None,
        transcription_capacity: int = 100,
        event_capacity: int = 50,
    ) -> HardwareSessionRecord:
        return HardwareSessionRecord(
            identity=identity,
            connection_key=connection_key or f"conn-{identity}",
            handle=handle or FakeDeviceHandle(),
            connected_at=clock(),
            transcription_capacity=transcription_capacity,
            event_capacity=event_capacity,
        )

    return _make


@pytest.fixture
def directory() -> SessionDirectory:
    return SessionDirectory()


@pytest.fixture
def device_factory() -> Callable[[], FakeDeviceHandle]:
    return FakeDeviceHandle


@dataclass
class GatewayHarness:
    gateway: McpGateway
    directory: SessionDirectory
    protocol_sessions: ProtocolSessionManager
    tokens: TokenRegistry


@pytest.fixture
def gateway_harness(directory: SessionDirectory, clock: StepClock) -> GatewayHarness:
    tokens = TokenRegistry(InMemoryTokenStore())
    tokens.seed_from_config({"alice-token": "alice", "bob-token": "bob"})
    protocol_sessions = ProtocolSessionManager(InMemoryProtocolSessionRegistry(), clock=clock)
    tool_registry = build_tool_registry()
    executor = ToolExecutor(
        tool_registry,
        ToolContext(directory=directory, device_app_name="com.example.glass-mcp"),
    )
    gateway = McpGateway(
        tokens=tokens,
        protocol_sessions=protocol_sessions,
        directory=directory,
        tool_registry=tool_registry,
        tool_executor=executor,
        admin_token="admin-secret",
    )
    return GatewayHarness(
        gateway=gateway,
        directory=directory,
        protocol_sessions=protocol_sessions,
        tokens=tokens,
    )
