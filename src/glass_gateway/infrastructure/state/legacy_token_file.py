"""One-time import of the legacy flat ``{identity: token}`` JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from glass_gateway.application.ports.token_store import TokenStorePort
from glass_gateway.errors import TokenCollisionError

logger = logging.getLogger("glass_gateway.tokens")


def import_legacy_tokens(store: TokenStorePort, path: Path) -> int:
    """Copy rows from ``path`` into ``store`` when the store is empty.

    Existing backend rows are never overwritten. Returns the number of
    imported rows.
    """
    if store.list_all():
        return 0
    if not path.exists():
        return 0

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning(
            "skipping unreadable legacy token file",
            extra={"data": {"path": str(path), "error": str(exc)}},
        )
        return 0
    if not isinstance(data, dict):
        logger.warning("skipping legacy token file without an object payload", extra={"data": {"path": str(path)}})
        return 0

    imported = 0
    for identity, token in data.items():
        if not isinstance(identity, str) or not isinstance(token, str) or not identity or not token:
            logger.warning("skipping malformed legacy token row", extra={"data": {"identity": identity}})
            continue
        try:
            store.save_token(identity, token)
        except TokenCollisionError:
            logger.warning("skipping duplicate legacy credential", extra={"data": {"identity": identity}})
            continue
        imported += 1

    logger.info(
        "imported legacy credentials",
        extra={"data": {"path": str(path), "count": imported}},
    )
    return imported


__all__ = ["import_legacy_tokens"]
