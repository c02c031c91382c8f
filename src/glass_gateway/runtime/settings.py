"""Configuration for the gateway runtime."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_SETTINGS_CONFIG = SettingsConfigDict(
    env_prefix="",
    extra="ignore",
    case_sensitive=False,
    frozen=True,
    env_file=".env",
    env_file_encoding="utf-8",
)


class TokenSettings(BaseSettings):
    """Credential backend selection and operator-issued credentials."""

    model_config = _SETTINGS_CONFIG

    backend: Literal["auto", "sqlite", "supabase", "memory"] = Field(default="auto", alias="TOKEN_BACKEND")
    sqlite_db_path: str = Field(default="mcp.sqlite", alias="SQLITE_DB_PATH")
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_service_key: SecretStr | None = Field(default=None, alias="SUPABASE_SERVICE_KEY")
    legacy_token_file: str = Field(default="src/tokens.json", alias="LEGACY_TOKEN_FILE")
    admin_token: SecretStr = Field(default=SecretStr(""), alias="ADMIN_TOKEN")
    user_tokens: dict[str, str] = Field(default_factory=dict, alias="USER_TOKENS", repr=False)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key_value)

    @property
    def supabase_service_key_value(self) -> str:
        return self.supabase_service_key.get_secret_value() if self.supabase_service_key else ""

    @property
    def admin_token_value(self) -> str:
        return self.admin_token.get_secret_value()

    def resolved_backend(self) -> str:
        if self.backend != "auto":
            return self.backend
        return "supabase" if self.supabase_configured else "sqlite"


class DeviceSettings(BaseSettings):
    """Per-connection buffer and display behaviour."""

    model_config = _SETTINGS_CONFIG

    package_name: str = Field(default="com.example.glass-mcp", alias="PACKAGE_NAME")
    transcription_buffer_size: int = Field(default=100, gt=0, alias="TRANSCRIPTION_BUFFER_SIZE")
    event_buffer_size: int = Field(default=50, gt=0, alias="EVENT_BUFFER_SIZE")
    display_page_chars: int = Field(default=500, gt=0, alias="DISPLAY_PAGE_CHARS")
    display_page_delay_seconds: float = Field(default=4.0, ge=0, alias="DISPLAY_PAGE_DELAY_SECONDS")


class BridgeSettings(BaseSettings):
    """Where the stdio bridge forwards messages and which credential it presents."""

    model_config = _SETTINGS_CONFIG

    url: str = Field(default="http://localhost:3000/mcp", alias="MCP_URL")
    token: SecretStr = Field(default=SecretStr(""), alias="MCP_TOKEN")
    timeout_seconds: float = Field(default=60.0, gt=0, alias="MCP_TIMEOUT_SECONDS")

    @property
    def token_value(self) -> str:
        return self.token.get_secret_value()


class ObservabilitySettings(BaseSettings):
    """Flags controlling logging/export behavior."""

    model_config = _SETTINGS_CONFIG

    enable_cloud_logging: bool = Field(default=False, alias="ENABLE_CLOUD_LOGGING")
    gcp_project_id: str | None = Field(default=None, alias="GCP_PROJECT_ID")


class Settings(BaseSettings):
    """Gateway runtime configuration resolved from the environment."""

    model_config = _SETTINGS_CONFIG

    # --- Server ---
    listen_host: str = Field(default="0.0.0.0", alias="GLASS_GATEWAY_HOST")  # noqa: S104
    port: int = Field(default=3000, alias="GLASS_GATEWAY_PORT")
    server_name: str = Field(default="mentra-glass-mcp", alias="MCP_SERVER_NAME")
    server_version: str = Field(default="1.0.0", alias="MCP_SERVER_VERSION")
    sse_heartbeat_seconds: float = Field(default=15.0, gt=0, alias="SSE_HEARTBEAT_SECONDS")

    # --- Component settings ---
    tokens: TokenSettings = Field(default_factory=TokenSettings)
    device: DeviceSettings = Field(default_factory=DeviceSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    # --- Loader ---
    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("glass_gateway.runtime")
        logger.info("gateway settings loaded: %r", instance)
        return instance


__all__ = ["BridgeSettings", "DeviceSettings", "ObservabilitySettings", "Settings", "TokenSettings"]
