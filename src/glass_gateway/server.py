"""Entrypoint for running the gateway API service under uvicorn."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from glass_gateway.infrastructure.http.middleware import request_logging_middleware
from glass_gateway.infrastructure.http.routes import add_health_routes, add_mcp_routes
from glass_gateway.infrastructure.observability.logging import (
    configure_logging,
    init_logging,
    shutdown_logging,
)
from glass_gateway.infrastructure.observability.tracing import configure_tracing
from glass_gateway.runtime.bootstrap import RuntimeContext, build_runtime, close_runtime_resources
from glass_gateway.runtime.settings import Settings


def configure_observability(settings: Settings) -> None:
    observability = settings.observability
    if observability.enable_cloud_logging and not observability.gcp_project_id:
        raise RuntimeError("Cloud logging enabled but no GCP project configured")
    configure_logging(
        cloud_logging_enabled=observability.enable_cloud_logging,
        gcp_project=observability.gcp_project_id,
        cloud_log_labels={"service": "glass-gateway"} if observability.enable_cloud_logging else None,
    )


def create_app(runtime: RuntimeContext) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        close_runtime_resources(runtime)
        shutdown_logging()

    app = FastAPI(title="Glass MCP Gateway", version=runtime.settings.server_version, lifespan=lifespan)
    app.state.runtime = runtime
    app.middleware("http")(request_logging_middleware)

    add_mcp_routes(app, runtime.mcp_route_deps_provider)
    add_health_routes(app, runtime.mcp_route_deps_provider)

    return app


def main() -> None:
    import uvicorn

    init_logging()
    configure_tracing(service_name="glass-gateway")
    settings = Settings.load()
    configure_observability(settings)
    runtime = build_runtime(settings)
    app = create_app(runtime)

    uvicorn.run(
        app,
        host=settings.listen_host,
        port=settings.port,
        # logging already setup
        log_config=None,
    )


__all__ = ["configure_observability", "create_app", "main"]
