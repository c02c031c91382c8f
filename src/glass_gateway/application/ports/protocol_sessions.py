"""Port describing protocol session state access."""

from __future__ import annotations

from typing import Protocol

from glass_gateway.domain.protocol_session import ProtocolSession


class ProtocolSessionRegistryPort(Protocol):
    """In-memory registry for issued protocol sessions."""

    def create(self, session: ProtocolSession) -> None:
        """Store a newly minted session."""

    def get(self, session_id: str) -> ProtocolSession | None:
        """Return the session identified by ``session_id``."""

    def update(self, session: ProtocolSession) -> None:
        """Persist an updated session snapshot."""

    def delete(self, session_id: str) -> None:
        """Remove the session, if present."""

    def count(self) -> int:
        """Return the number of live sessions."""


__all__ = ["ProtocolSessionRegistryPort"]
