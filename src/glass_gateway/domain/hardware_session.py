"""Live device connection records with bounded event history."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Coroutine, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from glass_gateway.application.ports.device import DeviceHandle

logger = logging.getLogger("glass_gateway.sessions")

DEFAULT_TRANSCRIPTION_CAPACITY = 100
DEFAULT_EVENT_CAPACITY = 50


@dataclass(frozen=True, slots=True)
class TranscriptionEntry:
    """A single speech-to-text result reported by the device."""

    text: str
    is_final: bool
    timestamp: datetime

    def to_payload(self) -> dict[str, object]:
        return {
            "text": self.text,
            "isFinal": self.is_final,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class InputEvent:
    """A button or touch event reported by the device."""

    kind: str
    payload: Mapping[str, Any]
    timestamp: datetime

    def to_payload(self) -> dict[str, object]:
        return {
            "type": self.kind,
            "data": dict(self.payload),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(slots=True)
class HardwareSessionRecord:
    """Binding between one identity and its connected device.

    Both buffers are ring buffers: appending past capacity evicts the oldest
    entry. Background work started for this device (paged display output,
    speech) is tracked so that ``close`` can cancel it when the device goes
    away.
    """

    identity: str
    connection_key: str
    handle: DeviceHandle
    connected_at: datetime
    transcription_capacity: int = DEFAULT_TRANSCRIPTION_CAPACITY
    event_capacity: int = DEFAULT_EVENT_CAPACITY
    transcriptions: deque[TranscriptionEntry] = field(init=False)
    events: deque[InputEvent] = field(init=False)
    _tasks: set[asyncio.Task[Any]] = field(init=False, default_factory=set)
    _closed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("identity must be non-empty")
        if self.transcription_capacity <= 0:
            raise ValueError("transcription_capacity must be positive")
        if self.event_capacity <= 0:
            raise ValueError("event_capacity must be positive")
        self.transcriptions = deque(maxlen=self.transcription_capacity)
        self.events = deque(maxlen=self.event_capacity)

    @property
    def closed(self) -> bool:
        return self._closed

    def add_transcription(self, text: str, *, is_final: bool, at: datetime) -> None:
        self.transcriptions.append(TranscriptionEntry(text=text, is_final=is_final, timestamp=at))

    def add_event(self, kind: str, payload: Mapping[str, Any], *, at: datetime) -> None:
        self.events.append(InputEvent(kind=kind, payload=payload, timestamp=at))

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Run ``coro`` in the background for as long as this record is live."""
        if self._closed:
            coro.close()
            raise RuntimeError(f"device session for {self.identity!r} is closed")
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def pending_tasks(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def close(self) -> None:
        """Cancel in-flight background work; buffers are left to the garbage collector."""
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "background device task failed",
                exc_info=exc,
                extra={"data": {"identity": self.identity, "task": task.get_name()}},
            )


__all__ = [
    "DEFAULT_EVENT_CAPACITY",
    "DEFAULT_TRANSCRIPTION_CAPACITY",
    "HardwareSessionRecord",
    "InputEvent",
    "TranscriptionEntry",
]
