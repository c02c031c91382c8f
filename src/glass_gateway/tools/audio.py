"""Audio tools."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from glass_gateway.tools.registry import NOT_CONNECTED_TEXT, ToolContext, ToolResult, ToolSpec


class SpeakArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = Field(min_length=1, description="Text to speak")


async def speak(args: SpeakArgs, identity: str, context: ToolContext) -> ToolResult:
    record = context.device_for(identity)
    if record is None:
        return ToolResult(NOT_CONNECTED_TEXT)
    # Speech can take seconds; the call returns as soon as playback is started.
    record.spawn(record.handle.speak(args.text), name=f"speak:{record.identity}")
    return ToolResult(f'Speaking on your glasses: "{args.text}"')


AUDIO_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="glasses_speak",
        description="Speak text using TTS on YOUR smart glasses",
        arguments_model=SpeakArgs,
        handler=speak,
    ),
)


__all__ = ["AUDIO_TOOLS", "SpeakArgs"]
