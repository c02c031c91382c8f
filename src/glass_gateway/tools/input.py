"""Input tools: read buffered voice transcriptions and button events."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

from glass_gateway.tools.registry import NOT_CONNECTED_TEXT, ToolContext, ToolResult, ToolSpec

NO_TRANSCRIPTIONS_TEXT = "No voice input yet. Speak into your glasses microphone."
NO_EVENTS_TEXT = "No button/touch events"


class GetTranscriptionsArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    only_final: bool = Field(
        default=True,
        alias="onlyFinal",
        description="Only return final transcriptions (default true)",
    )
    clear: bool = Field(default=False, description="Clear buffer after reading (default false)")


class GetEventsArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    clear: bool = Field(default=False, description="Clear buffer after reading")


async def get_transcriptions(
    args: GetTranscriptionsArgs, identity: str, context: ToolContext
) -> ToolResult:
    record = context.device_for(identity)
    if record is None:
        return ToolResult(NOT_CONNECTED_TEXT)

    entries = list(record.transcriptions)
    if args.only_final:
        entries = [entry for entry in entries if entry.is_final]
    if args.clear:
        record.transcriptions.clear()

    if not entries:
        return ToolResult(NO_TRANSCRIPTIONS_TEXT)
    return ToolResult(json.dumps([entry.to_payload() for entry in entries], indent=2))


async def get_events(args: GetEventsArgs, identity: str, context: ToolContext) -> ToolResult:
    record = context.device_for(identity)
    if record is None:
        return ToolResult(NOT_CONNECTED_TEXT)

    events = list(record.events)
    if args.clear:
        record.events.clear()

    if not events:
        return ToolResult(NO_EVENTS_TEXT)
    return ToolResult(json.dumps([event.to_payload() for event in events], indent=2, default=str))


INPUT_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="glasses_get_transcriptions",
        description="Get YOUR voice transcriptions from glasses microphone (voice input)",
        arguments_model=GetTranscriptionsArgs,
        handler=get_transcriptions,
    ),
    ToolSpec(
        name="glasses_get_events",
        description="Get button and touch events from YOUR glasses",
        arguments_model=GetEventsArgs,
        handler=get_events,
    ),
)


__all__ = [
    "INPUT_TOOLS",
    "NO_EVENTS_TEXT",
    "NO_TRANSCRIPTIONS_TEXT",
    "GetEventsArgs",
    "GetTranscriptionsArgs",
]
