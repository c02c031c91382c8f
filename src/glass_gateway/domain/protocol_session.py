"""Remote protocol (MCP) session records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ProtocolSession:
    """One logical client conversation bound to a single identity for its lifetime."""

    session_id: str
    identity: str
    created_at: datetime
    last_seen: datetime

    def __post_init__(self) -> None:
        if not self.session_id:
            raise ValueError("session_id must be non-empty")
        if not self.identity:
            raise ValueError("identity must be non-empty")
        if self.last_seen < self.created_at:
            raise ValueError("last_seen must not precede created_at")

    def touch(self, at: datetime) -> ProtocolSession:
        """Return a copy with ``last_seen`` advanced to ``at``."""
        return replace(self, last_seen=max(at, self.last_seen))

    def is_owned_by(self, identity: str) -> bool:
        return self.identity == identity


__all__ = ["ProtocolSession"]
