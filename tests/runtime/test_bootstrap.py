from __future__ import annotations

import json

import pytest

from glass_gateway.errors import TokenCollisionError, TokenStoreError
from glass_gateway.infrastructure.state.memory_token_store import InMemoryTokenStore
from glass_gateway.infrastructure.state.sqlite_token_store import SqliteTokenStore
from glass_gateway.infrastructure.state.supabase_token_store import SupabaseTokenStore
from glass_gateway.runtime.bootstrap import build_runtime, build_token_store, close_runtime_resources
from glass_gateway.runtime.settings import Settings, TokenSettings


def _settings(tmp_path, **tokens) -> Settings:
    token_settings = TokenSettings.model_validate(
        {
            "TOKEN_BACKEND": "sqlite",
            "SQLITE_DB_PATH": str(tmp_path / "mcp.sqlite"),
            "LEGACY_TOKEN_FILE": str(tmp_path / "tokens.json"),
            **tokens,
        }
    )
    return Settings.model_validate({"tokens": token_settings})


def test_runtime_seeds_configured_credentials(tmp_path) -> None:
    runtime = build_runtime(_settings(tmp_path, USER_TOKENS={"tok-a": "alice"}, ADMIN_TOKEN="root"))
    try:
        assert runtime.gateway.authenticate("tok-a").identity == "alice"
        assert runtime.gateway.authenticate("root").identity == "*"
        assert runtime.mcp_route_deps_provider().gateway is runtime.gateway
        assert len(runtime.tool_registry) == 6
    finally:
        close_runtime_resources(runtime)


def test_runtime_imports_legacy_file_once(tmp_path) -> None:
    (tmp_path / "tokens.json").write_text(json.dumps({"alice": "legacy-tok"}), encoding="utf-8")

    runtime = build_runtime(_settings(tmp_path))
    try:
        assert runtime.token_registry.resolve_identity("legacy-tok") == "alice"
    finally:
        close_runtime_resources(runtime)


def test_conflicting_seed_aborts_startup(tmp_path) -> None:
    (tmp_path / "tokens.json").write_text(json.dumps({"alice": "shared"}), encoding="utf-8")

    with pytest.raises(TokenCollisionError):
        build_runtime(_settings(tmp_path, USER_TOKENS={"shared": "bob"}))


def test_unreachable_backend_aborts_startup(tmp_path) -> None:
    settings = _settings(tmp_path, SQLITE_DB_PATH=str(tmp_path))

    with pytest.raises(TokenStoreError):
        build_runtime(settings)


def test_backend_selection(tmp_path) -> None:
    assert isinstance(build_token_store(TokenSettings.model_validate({"TOKEN_BACKEND": "memory"})), InMemoryTokenStore)
    assert isinstance(
        build_token_store(
            TokenSettings.model_validate({"TOKEN_BACKEND": "sqlite", "SQLITE_DB_PATH": str(tmp_path / "a.db")})
        ),
        SqliteTokenStore,
    )
    assert isinstance(
        build_token_store(
            TokenSettings.model_validate(
                {"TOKEN_BACKEND": "auto", "SUPABASE_URL": "https://x.supabase.co", "SUPABASE_SERVICE_KEY": "k"}
            )
        ),
        SupabaseTokenStore,
    )


def test_explicit_supabase_without_credentials_fails(monkeypatch) -> None:
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)

    with pytest.raises(TokenStoreError):
        build_token_store(TokenSettings.model_validate({"TOKEN_BACKEND": "supabase"}))
