"""Display tools: show and clear text on the caller's HUD."""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Awaitable, Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from glass_gateway.application.ports.device import DeviceHandle
from glass_gateway.tools.registry import NOT_CONNECTED_TEXT, ToolContext, ToolResult, ToolSpec

logger = logging.getLogger("glass_gateway.tools")

DEFAULT_DURATION_MS = 4000
MIN_DURATION_MS = 500
MAX_DURATION_MS = 60000


class DisplayTextArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str = Field(min_length=1, description="Text to display; long text is paged")
    duration_ms: float | None = Field(
        default=None,
        alias="durationMs",
        description="Duration per page in ms (500-60000, default 4000)",
    )


class ClearDisplayArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


def clamp_duration(duration_ms: float | None) -> int:
    if not duration_ms:
        return DEFAULT_DURATION_MS
    return int(min(max(duration_ms, MIN_DURATION_MS), MAX_DURATION_MS))


def split_pages(text: str, page_chars: int) -> list[str]:
    """Split ``text`` into display pages of at most ``page_chars``, preferring word boundaries.

    Line breaks in the input survive: each line is wrapped on its own and the
    wrapped lines are packed into pages joined by ``\\n``.
    """
    if len(text) <= page_chars:
        return [text]

    pages: list[str] = []
    current = ""
    for line in text.splitlines():
        for piece in textwrap.wrap(line, width=page_chars) or [""]:
            candidate = f"{current}\n{piece}" if current else piece
            if len(candidate) <= page_chars:
                current = candidate
                continue
            pages.append(current)
            current = piece
    if current:
        pages.append(current)
    return pages or [text[:page_chars]]


async def page_through(
    handle: DeviceHandle,
    pages: Sequence[str],
    *,
    duration_ms: int,
    delay_seconds: float,
    sleep: Callable[[float], Awaitable[None]],
) -> None:
    for index, page in enumerate(pages):
        if index:
            await sleep(delay_seconds)
        handle.show_text(page, duration_ms=duration_ms)


async def display_text(args: DisplayTextArgs, identity: str, context: ToolContext) -> ToolResult:
    record = context.device_for(identity)
    if record is None:
        return ToolResult(NOT_CONNECTED_TEXT)

    duration_ms = clamp_duration(args.duration_ms)
    pages = split_pages(args.text, context.display.page_chars)
    if len(pages) == 1:
        record.handle.show_text(pages[0], duration_ms=duration_ms)
        return ToolResult(f'Displayed on your glasses: "{args.text}"')

    record.spawn(
        page_through(
            record.handle,
            pages,
            duration_ms=duration_ms,
            delay_seconds=context.display.page_delay_seconds,
            sleep=context.sleep,
        ),
        name=f"display-pages:{record.identity}",
    )
    logger.info(
        "paging display text",
        extra={"data": {"identity": record.identity, "pages": len(pages)}},
    )
    return ToolResult(f"Displaying {len(pages)} pages on your glasses.")


async def clear_display(args: ClearDisplayArgs, identity: str, context: ToolContext) -> ToolResult:
    del args
    record = context.device_for(identity)
    if record is None:
        return ToolResult(NOT_CONNECTED_TEXT)
    record.handle.clear_display()
    return ToolResult("Your glasses display was cleared.")


DISPLAY_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="glasses_display_text",
        description="Display text on YOUR connected smart glasses HUD",
        arguments_model=DisplayTextArgs,
        handler=display_text,
    ),
    ToolSpec(
        name="glasses_clear_display",
        description="Clear YOUR glasses display",
        arguments_model=ClearDisplayArgs,
        handler=clear_display,
    ),
)


__all__ = [
    "DISPLAY_TOOLS",
    "ClearDisplayArgs",
    "DisplayTextArgs",
    "clamp_duration",
    "page_through",
    "split_pages",
]
