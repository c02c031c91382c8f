from __future__ import annotations

import json

import httpx
import pytest

from glass_gateway.application.token_registry import TokenRegistry
from glass_gateway.errors import TokenCollisionError, TokenStoreError
from glass_gateway.infrastructure.state.supabase_token_store import SupabaseTokenStore


class FakePostgrest:
    """Minimal stand-in for the ``tokens`` table behind PostgREST."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, object]] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.url.path == "/rest/v1/tokens"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
        if request.method == "GET":
            return httpx.Response(200, json=self._select(request.url.params))
        if request.method == "POST":
            row = json.loads(request.content)
            for other in self.rows.values():
                if other["token"] == row["token"] and other["email"] != row["email"]:
                    return httpx.Response(409, json={"message": "duplicate key"})
            self.rows[str(row["email"])] = row
            return httpx.Response(201)
        return httpx.Response(405)

    def _select(self, params: httpx.QueryParams) -> list[dict[str, object]]:
        rows = list(self.rows.values())
        for column in ("email", "token"):
            value = params.get(column)
            if value is not None:
                rows = [row for row in rows if row[column] == value.removeprefix("eq.")]
        if params.get("limit"):
            rows = rows[: int(params["limit"])]
        columns = params.get("select", "*").split(",")
        return [{column: row[column] for column in columns} for row in rows]


def _store(backend) -> SupabaseTokenStore:
    return SupabaseTokenStore(
        base_url="https://example.supabase.co/",
        service_key="service-key",
        transport=httpx.MockTransport(backend),
        clock=lambda: 42,
    )


def test_issue_and_resolve_through_rest_api() -> None:
    backend = FakePostgrest()
    store = _store(backend)
    store.init()
    registry = TokenRegistry(store)

    token = registry.issue_or_get_token("alice")

    assert registry.resolve_identity(token) == "alice"
    assert registry.issue_or_get_token("alice") == token
    assert backend.rows["alice"]["created_at"] == 42
    post = next(request for request in backend.requests if request.method == "POST")
    assert post.url.params["on_conflict"] == "email"
    assert "merge-duplicates" in post.headers["prefer"]


def test_conflict_maps_to_collision() -> None:
    backend = FakePostgrest()
    store = _store(backend)
    store.save_token("alice", "shared")

    with pytest.raises(TokenCollisionError):
        store.save_token("bob", "shared")


def test_list_all_maps_rows() -> None:
    backend = FakePostgrest()
    store = _store(backend)
    store.save_token("alice", "tok-a")

    rows = store.list_all()

    assert [(row.identity, row.token, row.created_at) for row in rows] == [("alice", "tok-a", 42)]


def test_init_fails_when_table_missing() -> None:
    store = _store(lambda request: httpx.Response(404, json={"message": "relation does not exist"}))

    with pytest.raises(TokenStoreError):
        store.init()


def test_init_fails_when_backend_unreachable() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TokenStoreError):
        _store(_refuse).init()


def test_empty_configuration_is_rejected() -> None:
    with pytest.raises(ValueError):
        SupabaseTokenStore(base_url="", service_key="key")
