"""Port describing a live device handle supplied by the hardware provider."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

TranscriptionCallback = Callable[[str, bool], None]
ButtonCallback = Callable[[Mapping[str, Any]], None]
DisconnectCallback = Callable[[], None]


class DeviceHandle(Protocol):
    """Display, audio and event primitives of one connected device.

    Display calls are issued without waiting for device acknowledgement.
    """

    def show_text(self, text: str, *, duration_ms: int) -> None:
        """Show ``text`` on the main view for ``duration_ms`` milliseconds."""

    def clear_display(self) -> None:
        """Clear the main view."""

    async def speak(self, text: str) -> None:
        """Play ``text`` through text-to-speech."""

    def on_transcription(self, callback: TranscriptionCallback) -> None:
        """Subscribe ``callback(text, is_final)`` to speech transcription results."""

    def on_button_press(self, callback: ButtonCallback) -> None:
        """Subscribe ``callback(payload)`` to button and touch events."""

    def on_disconnect(self, callback: DisconnectCallback) -> None:
        """Subscribe ``callback()`` to the device disconnecting."""


__all__ = [
    "ButtonCallback",
    "DeviceHandle",
    "DisconnectCallback",
    "TranscriptionCallback",
]
