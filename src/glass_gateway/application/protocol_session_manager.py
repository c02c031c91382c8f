"""Protocol session binding use case."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from glass_gateway.application.ports.protocol_sessions import ProtocolSessionRegistryPort
from glass_gateway.domain.protocol_session import ProtocolSession

logger = logging.getLogger("glass_gateway.gateway")


def _new_session_id() -> str:
    return f"mcp-{uuid4().hex}"


class ProtocolSessionManager:
    """Binds protocol session ids to the identity that first used them."""

    def __init__(
        self,
        sessions: ProtocolSessionRegistryPort,
        *,
        clock: Callable[[], datetime],
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._sessions = sessions
        self._clock = clock
        self._new_id = id_factory or _new_session_id

    def bind(self, presented_id: str | None, identity: str) -> ProtocolSession:
        """Reuse ``presented_id`` when it is owned by ``identity``; otherwise mint a fresh session.

        An id that was never issued, or that belongs to another identity, is
        never honoured. The caller simply receives a new id.
        """
        now = self._clock()
        if presented_id:
            existing = self._sessions.get(presented_id)
            if existing is not None and existing.is_owned_by(identity):
                touched = existing.touch(now)
                self._sessions.update(touched)
                return touched
            if existing is not None:
                logger.warning(
                    "protocol session id presented by a different identity; minting a new one",
                    extra={"data": {"identity": identity}},
                )

        session = ProtocolSession(
            session_id=self._mint_unused_id(),
            identity=identity,
            created_at=now,
            last_seen=now,
        )
        self._sessions.create(session)
        logger.info(
            "protocol session created",
            extra={"data": {"identity": identity, "session_id": session.session_id}},
        )
        return session

    def lookup(self, presented_id: str | None, identity: str) -> ProtocolSession | None:
        """Return the caller's own session for ``presented_id`` without ever creating one."""
        if not presented_id:
            return None
        existing = self._sessions.get(presented_id)
        if existing is None or not existing.is_owned_by(identity):
            return None
        touched = existing.touch(self._clock())
        self._sessions.update(touched)
        return touched

    def terminate(self, session_id: str, identity: str) -> bool:
        """Remove ``session_id`` when ``identity`` owns it; return whether anything was removed."""
        existing = self._sessions.get(session_id)
        if existing is None or not existing.is_owned_by(identity):
            return False
        self._sessions.delete(session_id)
        logger.info(
            "protocol session terminated",
            extra={"data": {"identity": identity, "session_id": session_id}},
        )
        return True

    def active_count(self) -> int:
        return self._sessions.count()

    def _mint_unused_id(self) -> str:
        while True:
            candidate = self._new_id()
            if self._sessions.get(candidate) is None:
                return candidate


__all__ = ["ProtocolSessionManager"]
