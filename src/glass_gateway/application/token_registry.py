"""Credential issuance and identity resolution use case."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from glass_gateway.application.passphrase import generate_passphrase
from glass_gateway.application.ports.token_store import TokenStorePort
from glass_gateway.domain.identity import StoredToken
from glass_gateway.errors import TokenCollisionError

logger = logging.getLogger("glass_gateway.tokens")

MAX_GENERATION_ATTEMPTS = 16


class TokenRegistry:
    """Sole source of truth for which identity a bearer credential belongs to."""

    def __init__(
        self,
        store: TokenStorePort,
        *,
        generate: Callable[[], str] | None = None,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self._store = store
        self._generate = generate or generate_passphrase
        self._max_attempts = max_attempts

    def issue_or_get_token(self, identity: str) -> str:
        """Return the identity's credential, minting and persisting one on first request."""
        if not identity:
            raise ValueError("identity must be non-empty")
        existing = self._store.get_token(identity)
        if existing is not None:
            return existing

        token = self._fresh_token()
        self._store.save_token(identity, token)
        logger.info("issued credential", extra={"data": {"identity": identity}})
        return token

    def resolve_identity(self, token: str) -> str | None:
        """Return the identity bound to ``token``; ``None`` means unauthenticated."""
        if not token:
            return None
        return self._store.get_user_by_token(token)

    def seed_from_config(self, mapping: Mapping[str, str]) -> int:
        """Load operator-issued ``credential -> identity`` pairs; return how many were written."""
        written = 0
        for token, identity in mapping.items():
            if not token or not identity:
                raise ValueError("seeded credentials and identities must be non-empty")
            owner = self._store.get_user_by_token(token)
            if owner is not None and owner != identity:
                raise TokenCollisionError(
                    f"seeded credential for {identity!r} is already bound to another identity",
                )
            if owner == identity and self._store.get_token(identity) == token:
                continue
            self._store.save_token(identity, token)
            written += 1
        if written:
            logger.info("seeded credentials from config", extra={"data": {"count": written}})
        return written

    def list_all(self) -> list[StoredToken]:
        return self._store.list_all()

    def _fresh_token(self) -> str:
        for _ in range(self._max_attempts):
            candidate = self._generate()
            if self._store.get_user_by_token(candidate) is None:
                return candidate
            logger.warning("generated credential collided; regenerating")
        raise TokenCollisionError(
            f"could not generate an unused credential in {self._max_attempts} attempts",
        )


__all__ = ["MAX_GENERATION_ATTEMPTS", "TokenRegistry"]
