from __future__ import annotations

import pytest
from pydantic import ValidationError

from glass_gateway.runtime.settings import Settings, TokenSettings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY", "TOKEN_BACKEND", "USER_TOKENS", "ADMIN_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings()

    assert settings.listen_host == "0.0.0.0"  # noqa: S104
    assert settings.port == 3000
    assert settings.sse_heartbeat_seconds == 15.0
    assert settings.device.transcription_buffer_size == 100
    assert settings.device.event_buffer_size == 50
    assert settings.tokens.resolved_backend() == "sqlite"
    assert settings.tokens.admin_token_value == ""


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("GLASS_GATEWAY_PORT", "8080")
    monkeypatch.setenv("USER_TOKENS", '{"tok-a": "alice"}')
    monkeypatch.setenv("ADMIN_TOKEN", "admin-secret")
    monkeypatch.setenv("DISPLAY_PAGE_CHARS", "200")

    settings = Settings()

    assert settings.port == 8080
    assert settings.tokens.user_tokens == {"tok-a": "alice"}
    assert settings.tokens.admin_token_value == "admin-secret"
    assert "admin-secret" not in repr(settings)
    assert settings.device.display_page_chars == 200


def test_auto_backend_prefers_supabase_when_configured(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key")

    assert TokenSettings().resolved_backend() == "supabase"


def test_explicit_backend_is_respected(monkeypatch) -> None:
    monkeypatch.setenv("TOKEN_BACKEND", "memory")

    assert TokenSettings().resolved_backend() == "memory"


def test_unknown_backend_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("TOKEN_BACKEND", "redis")

    with pytest.raises(ValidationError):
        TokenSettings()


def test_seeded_credentials_are_hidden_from_repr(monkeypatch) -> None:
    monkeypatch.setenv("USER_TOKENS", '{"very-secret-tok": "alice"}')

    assert "very-secret-tok" not in repr(Settings())
