"""Runtime wiring for the gateway."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from glass_gateway.application.gateway import McpGateway, ServerInfo
from glass_gateway.application.ports.token_store import TokenStorePort
from glass_gateway.application.protocol_session_manager import ProtocolSessionManager
from glass_gateway.application.session_directory import SessionDirectory
from glass_gateway.application.token_registry import TokenRegistry
from glass_gateway.errors import TokenStoreError
from glass_gateway.infrastructure.hardware.adapter import HardwareSessionAdapter
from glass_gateway.infrastructure.http.routes import McpRouteDeps
from glass_gateway.infrastructure.state.legacy_token_file import import_legacy_tokens
from glass_gateway.infrastructure.state.memory_token_store import InMemoryTokenStore
from glass_gateway.infrastructure.state.protocol_session_registry import InMemoryProtocolSessionRegistry
from glass_gateway.infrastructure.state.sqlite_token_store import SqliteTokenStore
from glass_gateway.infrastructure.state.supabase_token_store import SupabaseTokenStore
from glass_gateway.runtime.settings import Settings, TokenSettings
from glass_gateway.tools.catalog import build_tool_registry
from glass_gateway.tools.registry import DisplayOptions, ToolContext, ToolExecutor, ToolRegistry

logger = logging.getLogger("glass_gateway.runtime")


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated runtime components for the gateway service."""

    settings: Settings
    token_store: TokenStorePort
    token_registry: TokenRegistry
    directory: SessionDirectory
    protocol_sessions: ProtocolSessionManager
    tool_registry: ToolRegistry
    tool_executor: ToolExecutor
    gateway: McpGateway
    hardware_adapter: HardwareSessionAdapter
    mcp_route_deps_provider: Callable[[], McpRouteDeps]


def build_runtime(
    settings: Settings | None = None,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> RuntimeContext:
    """Construct the runtime context; token backend failures abort startup."""
    resolved = settings or Settings.load()
    logger.info("loading gateway runtime configuration", extra={"data": {"backend": resolved.tokens.backend}})

    token_store = build_token_store(resolved.tokens)
    token_store.init()
    token_registry = _build_token_registry(resolved.tokens, token_store)

    directory = SessionDirectory()
    protocol_sessions = ProtocolSessionManager(InMemoryProtocolSessionRegistry(), clock=clock)

    tool_registry = build_tool_registry()
    tool_executor = ToolExecutor(
        tool_registry,
        ToolContext(
            directory=directory,
            device_app_name=resolved.device.package_name,
            display=DisplayOptions(
                page_chars=resolved.device.display_page_chars,
                page_delay_seconds=resolved.device.display_page_delay_seconds,
            ),
        ),
    )

    gateway = McpGateway(
        tokens=token_registry,
        protocol_sessions=protocol_sessions,
        directory=directory,
        tool_registry=tool_registry,
        tool_executor=tool_executor,
        admin_token=resolved.tokens.admin_token_value or None,
        server_info=ServerInfo(name=resolved.server_name, version=resolved.server_version),
    )
    hardware_adapter = HardwareSessionAdapter(
        directory,
        clock=clock,
        transcription_capacity=resolved.device.transcription_buffer_size,
        event_capacity=resolved.device.event_buffer_size,
    )

    route_deps = McpRouteDeps(gateway=gateway, heartbeat_seconds=resolved.sse_heartbeat_seconds)

    return RuntimeContext(
        settings=resolved,
        token_store=token_store,
        token_registry=token_registry,
        directory=directory,
        protocol_sessions=protocol_sessions,
        tool_registry=tool_registry,
        tool_executor=tool_executor,
        gateway=gateway,
        hardware_adapter=hardware_adapter,
        mcp_route_deps_provider=lambda: route_deps,
    )


def build_token_store(settings: TokenSettings) -> TokenStorePort:
    """Pick the credential backend named by ``TOKEN_BACKEND``."""
    backend = settings.resolved_backend()
    if backend == "supabase":
        if not settings.supabase_configured:
            raise TokenStoreError("TOKEN_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_KEY")
        logger.info("using supabase token store")
        return SupabaseTokenStore(
            base_url=settings.supabase_url or "",
            service_key=settings.supabase_service_key_value,
        )
    if backend == "memory":
        logger.warning("using in-memory token store; credentials will not survive a restart")
        return InMemoryTokenStore()
    logger.info("using sqlite token store", extra={"data": {"path": settings.sqlite_db_path}})
    return SqliteTokenStore(settings.sqlite_db_path)


def _build_token_registry(settings: TokenSettings, store: TokenStorePort) -> TokenRegistry:
    imported = import_legacy_tokens(store, Path(settings.legacy_token_file))
    if imported:
        logger.info("imported legacy credentials", extra={"data": {"count": imported}})
    registry = TokenRegistry(store)
    registry.seed_from_config(settings.user_tokens)
    return registry


def close_runtime_resources(runtime: RuntimeContext) -> None:
    """Close live device sessions and the credential backend."""
    closed = runtime.directory.close_all()
    if closed:
        logger.info("closed device sessions at shutdown", extra={"data": {"count": closed}})
    if isinstance(runtime.token_store, SqliteTokenStore):
        runtime.token_store.close()


__all__ = ["RuntimeContext", "build_runtime", "build_token_store", "close_runtime_resources"]
