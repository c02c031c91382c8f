"""Directory of live device sessions keyed by identity."""

from __future__ import annotations

import logging
from threading import Lock

from glass_gateway.domain.hardware_session import HardwareSessionRecord
from glass_gateway.domain.identity import is_wildcard

logger = logging.getLogger("glass_gateway.sessions")


class SessionDirectory:
    """Holds at most one ``HardwareSessionRecord`` per identity.

    Records are added and removed only by the hardware adapter. A reconnect
    under a new connection key supersedes the previous record; a late
    disconnect for the superseded key leaves the newer record in place.
    """

    def __init__(self) -> None:
        self._records: dict[str, HardwareSessionRecord] = {}
        self._keys_by_identity: dict[str, str] = {}
        self._lock = Lock()

    def add_session(self, connection_key: str, record: HardwareSessionRecord) -> None:
        if not connection_key:
            raise ValueError("connection_key must be non-empty")
        if is_wildcard(record.identity):
            raise ValueError("device sessions cannot be registered for the wildcard identity")
        with self._lock:
            superseded = self._supersede_locked(connection_key, record)
            self._records[connection_key] = record
            self._keys_by_identity[record.identity] = connection_key
        if superseded is not None:
            superseded.close()
            logger.info(
                "device session superseded",
                extra={
                    "data": {
                        "identity": record.identity,
                        "previous_key": superseded.connection_key,
                        "connection_key": connection_key,
                    }
                },
            )
        logger.info(
            "device session added",
            extra={"data": {"identity": record.identity, "connection_key": connection_key}},
        )

    def remove_session(self, connection_key: str) -> HardwareSessionRecord | None:
        with self._lock:
            record = self._records.pop(connection_key, None)
            if record is not None and self._keys_by_identity.get(record.identity) == connection_key:
                del self._keys_by_identity[record.identity]
        if record is None:
            return None
        record.close()
        logger.info(
            "device session removed",
            extra={"data": {"identity": record.identity, "connection_key": connection_key}},
        )
        return record

    def get_user_session(self, identity: str) -> HardwareSessionRecord | None:
        """Return the caller's record; ``None`` means the device is not connected."""
        with self._lock:
            if is_wildcard(identity):
                return self._latest_locked()
            key = self._keys_by_identity.get(identity)
            if key is None:
                return None
            return self._records.get(key)

    def get_connected_count(self) -> int:
        with self._lock:
            return len(self._records)

    def close_all(self) -> int:
        """Drop and close every record; used at shutdown."""
        with self._lock:
            records = list(self._records.values())
            self._records.clear()
            self._keys_by_identity.clear()
        for record in records:
            record.close()
        return len(records)

    def _supersede_locked(
        self, connection_key: str, record: HardwareSessionRecord
    ) -> HardwareSessionRecord | None:
        previous_key = self._keys_by_identity.get(record.identity)
        superseded: HardwareSessionRecord | None = None
        if previous_key is not None and previous_key != connection_key:
            superseded = self._records.pop(previous_key, None)
        replaced = self._records.get(connection_key)
        if replaced is not None and replaced is not record:
            if self._keys_by_identity.get(replaced.identity) == connection_key:
                del self._keys_by_identity[replaced.identity]
            replaced.close()
        return superseded

    def _latest_locked(self) -> HardwareSessionRecord | None:
        if not self._records:
            return None
        return max(self._records.values(), key=lambda record: record.connected_at)


__all__ = ["SessionDirectory"]
