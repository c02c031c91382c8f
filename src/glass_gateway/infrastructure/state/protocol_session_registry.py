"""In-memory protocol session registry implementation."""

from __future__ import annotations

from threading import Lock

from glass_gateway.application.ports.protocol_sessions import ProtocolSessionRegistryPort
from glass_gateway.domain.protocol_session import ProtocolSession


class InMemoryProtocolSessionRegistry(ProtocolSessionRegistryPort):
    """Stores protocol session snapshots in memory."""

    def __init__(self) -> None:
        self._sessions: dict[str, ProtocolSession] = {}
        self._lock = Lock()

    def create(self, session: ProtocolSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def get(self, session_id: str) -> ProtocolSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def update(self, session: ProtocolSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["InMemoryProtocolSessionRegistry"]
