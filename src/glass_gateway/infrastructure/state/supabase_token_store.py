"""Supabase (PostgREST) backed token store."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from glass_gateway.application.ports.token_store import TokenStorePort
from glass_gateway.domain.identity import StoredToken
from glass_gateway.errors import TokenCollisionError, TokenStoreError

logger = logging.getLogger("glass_gateway.tokens")

_TABLE_PATH = "/rest/v1/tokens"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class SupabaseTokenStore(TokenStorePort):
    """Implementation of TokenStorePort backed by the Supabase REST API over HTTPX.

    Expects a ``tokens`` table with ``email`` (primary key), ``token`` (unique)
    and ``created_at`` columns.
    """

    base_url: str
    service_key: str
    timeout_seconds: float = 10.0
    transport: httpx.BaseTransport | None = None
    clock: Callable[[], int] = field(default=_now_ms)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("supabase base_url must not be empty")
        if not self.service_key:
            raise ValueError("supabase service_key must not be empty")

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url.rstrip("/"),
            timeout=self.timeout_seconds,
            transport=self.transport,
            headers={
                "apikey": self.service_key,
                "Authorization": f"Bearer {self.service_key}",
                "Accept": "application/json",
            },
        )

    def init(self) -> None:
        try:
            with self._client() as client:
                response = client.get(_TABLE_PATH, params={"select": "email", "limit": "1"})
        except httpx.HTTPError as exc:
            raise TokenStoreError("supabase init failed: backend unreachable") from exc
        if response.status_code != httpx.codes.OK:
            raise TokenStoreError(
                f"supabase init failed with status {response.status_code}; ensure the 'tokens' table exists",
            )
        logger.info("supabase token store ready", extra={"data": {"base_url": self.base_url}})

    def get_token(self, identity: str) -> str | None:
        rows = self._select({"select": "token", "email": f"eq.{identity}"})
        return str(rows[0]["token"]) if rows else None

    def get_user_by_token(self, token: str) -> str | None:
        rows = self._select({"select": "email", "token": f"eq.{token}"})
        return str(rows[0]["email"]) if rows else None

    def save_token(self, identity: str, token: str) -> None:
        payload = {"email": identity, "token": token, "created_at": self.clock()}
        try:
            with self._client() as client:
                response = client.post(
                    _TABLE_PATH,
                    params={"on_conflict": "email"},
                    json=payload,
                    headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
                )
        except httpx.HTTPError as exc:
            raise TokenStoreError("failed to save credential: backend unreachable") from exc
        if response.status_code == httpx.codes.CONFLICT:
            raise TokenCollisionError("credential is already bound to another identity")
        if response.status_code not in (httpx.codes.OK, httpx.codes.CREATED, httpx.codes.NO_CONTENT):
            raise TokenStoreError(f"failed to save credential: status {response.status_code}")

    def list_all(self) -> list[StoredToken]:
        rows = self._select({"select": "email,token,created_at"})
        return [
            StoredToken(
                identity=str(row["email"]),
                token=str(row["token"]),
                created_at=int(row.get("created_at") or 0),
            )
            for row in rows
        ]

    def _select(self, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            with self._client() as client:
                response = client.get(_TABLE_PATH, params=params)
        except httpx.HTTPError as exc:
            raise TokenStoreError("token lookup failed: backend unreachable") from exc
        if response.status_code != httpx.codes.OK:
            raise TokenStoreError(f"token lookup failed with status {response.status_code}")
        payload = response.json()
        if not isinstance(payload, list):
            raise TokenStoreError("token lookup returned an unexpected payload")
        return payload


__all__ = ["SupabaseTokenStore"]
