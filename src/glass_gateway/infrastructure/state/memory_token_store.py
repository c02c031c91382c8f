"""In-memory implementation of the token store port."""

from __future__ import annotations

import time
from collections.abc import Callable
from threading import Lock

from glass_gateway.application.ports.token_store import TokenStorePort
from glass_gateway.domain.identity import StoredToken
from glass_gateway.errors import TokenCollisionError


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryTokenStore(TokenStorePort):
    """Keeps credentials for the lifetime of the process."""

    def __init__(self, *, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _now_ms
        self._rows: dict[str, StoredToken] = {}
        self._identities_by_token: dict[str, str] = {}
        self._lock = Lock()

    def init(self) -> None:
        return None

    def get_token(self, identity: str) -> str | None:
        with self._lock:
            row = self._rows.get(identity)
        return row.token if row is not None else None

    def get_user_by_token(self, token: str) -> str | None:
        with self._lock:
            return self._identities_by_token.get(token)

    def save_token(self, identity: str, token: str) -> None:
        with self._lock:
            owner = self._identities_by_token.get(token)
            if owner is not None and owner != identity:
                raise TokenCollisionError("credential is already bound to another identity")
            previous = self._rows.get(identity)
            if previous is not None:
                self._identities_by_token.pop(previous.token, None)
            self._rows[identity] = StoredToken(identity=identity, token=token, created_at=self._clock())
            self._identities_by_token[token] = identity

    def list_all(self) -> list[StoredToken]:
        with self._lock:
            return list(self._rows.values())


__all__ = ["InMemoryTokenStore"]
