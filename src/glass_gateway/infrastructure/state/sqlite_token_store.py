"""SQLite-backed token store."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable
from pathlib import Path
from threading import Lock

from glass_gateway.application.ports.token_store import TokenStorePort
from glass_gateway.domain.identity import StoredToken
from glass_gateway.errors import TokenCollisionError, TokenStoreError

logger = logging.getLogger("glass_gateway.tokens")

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS tokens (
        email TEXT PRIMARY KEY,
        token TEXT NOT NULL UNIQUE,
        created_at INTEGER
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_token ON tokens(token)",
)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SqliteTokenStore(TokenStorePort):
    """Persists credentials in a single ``tokens`` table.

    The ``email`` column holds the identity; the name is kept so existing
    databases keep working.
    """

    def __init__(self, path: Path | str, *, clock: Callable[[], int] | None = None) -> None:
        self._path = str(path)
        self._clock = clock or _now_ms
        self._conn: sqlite3.Connection | None = None
        self._lock = Lock()

    def init(self) -> None:
        try:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path, check_same_thread=False)
            with conn:
                for statement in _SCHEMA:
                    conn.execute(statement)
        except sqlite3.Error as exc:
            raise TokenStoreError(f"failed to initialise sqlite token store at {self._path}") from exc
        self._conn = conn
        logger.info("sqlite token store ready", extra={"data": {"path": self._path}})

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def get_token(self, identity: str) -> str | None:
        row = self._fetch_one("SELECT token FROM tokens WHERE email = ?", (identity,))
        return row[0] if row else None

    def get_user_by_token(self, token: str) -> str | None:
        row = self._fetch_one("SELECT email FROM tokens WHERE token = ?", (token,))
        return row[0] if row else None

    def save_token(self, identity: str, token: str) -> None:
        conn = self._require_conn()
        try:
            with self._lock, conn:
                conn.execute(
                    """
                    INSERT INTO tokens (email, token, created_at) VALUES (?, ?, ?)
                    ON CONFLICT(email) DO UPDATE SET
                        token = excluded.token,
                        created_at = excluded.created_at
                    """,
                    (identity, token, self._clock()),
                )
        except sqlite3.IntegrityError as exc:
            raise TokenCollisionError("credential is already bound to another identity") from exc
        except sqlite3.Error as exc:
            raise TokenStoreError("failed to save credential") from exc

    def list_all(self) -> list[StoredToken]:
        conn = self._require_conn()
        with self._lock:
            rows = conn.execute("SELECT email, token, created_at FROM tokens ORDER BY created_at").fetchall()
        return [
            StoredToken(identity=email, token=token, created_at=int(created_at or 0))
            for email, token, created_at in rows
        ]

    def _fetch_one(self, query: str, params: tuple[str, ...]) -> tuple[str] | None:
        conn = self._require_conn()
        with self._lock:
            return conn.execute(query, params).fetchone()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise TokenStoreError("sqlite token store used before init()")
        return self._conn


__all__ = ["SqliteTokenStore"]
