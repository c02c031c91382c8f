"""Port describing persistent credential storage."""

from __future__ import annotations

from typing import Protocol

from glass_gateway.domain.identity import StoredToken


class TokenStorePort(Protocol):
    """Persists the identity to credential mapping."""

    def init(self) -> None:
        """Prepare the backend; raise ``TokenStoreError`` when it is unusable."""

    def get_token(self, identity: str) -> str | None:
        """Return the credential issued to ``identity``, if any."""

    def get_user_by_token(self, token: str) -> str | None:
        """Return the identity bound to ``token``, if any."""

    def save_token(self, identity: str, token: str) -> None:
        """Insert or replace the credential for ``identity``."""

    def list_all(self) -> list[StoredToken]:
        """Return every stored credential row."""


__all__ = ["TokenStorePort"]
