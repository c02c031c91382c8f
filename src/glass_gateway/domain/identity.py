"""Identity and credential primitives."""

from __future__ import annotations

from dataclasses import dataclass

WILDCARD_IDENTITY = "*"
"""Identity resolved from the administrative credential; may act on any user's device."""


def is_wildcard(identity: str) -> bool:
    return identity == WILDCARD_IDENTITY


@dataclass(frozen=True, slots=True)
class StoredToken:
    """Credential row as persisted by a token store."""

    identity: str
    token: str
    created_at: int

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("identity must be non-empty")
        if not self.token:
            raise ValueError("token must be non-empty")
        if self.created_at < 0:
            raise ValueError("created_at must be non-negative")


__all__ = ["WILDCARD_IDENTITY", "StoredToken", "is_wildcard"]
