"""Glue between the hardware session provider and the session directory."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from glass_gateway.application.ports.device import DeviceHandle
from glass_gateway.application.session_directory import SessionDirectory
from glass_gateway.domain.hardware_session import (
    DEFAULT_EVENT_CAPACITY,
    DEFAULT_TRANSCRIPTION_CAPACITY,
    HardwareSessionRecord,
)

logger = logging.getLogger("glass_gateway.hardware")

READY_BANNER = "Glass MCP Ready!"
READY_BANNER_DURATION_MS = 2000


class HardwareSessionAdapter:
    """Receives connect notifications from the provider and wires device callbacks.

    The provider calls ``on_session`` once per device connection. Everything
    after that (transcriptions, button presses, disconnect) arrives through
    callbacks registered on the handle.
    """

    def __init__(
        self,
        directory: SessionDirectory,
        *,
        clock: Callable[[], datetime],
        transcription_capacity: int = DEFAULT_TRANSCRIPTION_CAPACITY,
        event_capacity: int = DEFAULT_EVENT_CAPACITY,
    ) -> None:
        self._directory = directory
        self._clock = clock
        self._transcription_capacity = transcription_capacity
        self._event_capacity = event_capacity

    def on_session(self, handle: DeviceHandle, session_id: str, user_id: str) -> HardwareSessionRecord:
        record = HardwareSessionRecord(
            identity=user_id,
            connection_key=session_id,
            handle=handle,
            connected_at=self._clock(),
            transcription_capacity=self._transcription_capacity,
            event_capacity=self._event_capacity,
        )
        self._directory.add_session(session_id, record)
        logger.info("glasses connected", extra={"data": {"identity": user_id, "connection_key": session_id}})

        handle.show_text(READY_BANNER, duration_ms=READY_BANNER_DURATION_MS)
        handle.on_transcription(lambda text, is_final: self._on_transcription(record, text, is_final))
        handle.on_button_press(lambda payload: self._on_button_press(record, payload))
        handle.on_disconnect(lambda: self.on_disconnect(session_id))
        return record

    def on_disconnect(self, session_id: str) -> None:
        record = self._directory.remove_session(session_id)
        if record is not None:
            logger.info(
                "glasses disconnected",
                extra={"data": {"identity": record.identity, "connection_key": session_id}},
            )

    def _on_transcription(self, record: HardwareSessionRecord, text: str, is_final: bool) -> None:
        if record.closed:
            return
        logger.debug(
            "transcription received",
            extra={"data": {"identity": record.identity, "is_final": is_final}},
        )
        record.add_transcription(text, is_final=is_final, at=self._clock())

    def _on_button_press(self, record: HardwareSessionRecord, payload: Mapping[str, Any]) -> None:
        if record.closed:
            return
        logger.debug("button event received", extra={"data": {"identity": record.identity}})
        record.add_event("button", payload, at=self._clock())


__all__ = ["HardwareSessionAdapter", "READY_BANNER"]
