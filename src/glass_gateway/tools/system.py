"""Status tool."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from glass_gateway.tools.registry import ToolContext, ToolResult, ToolSpec


class StatusArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


async def status(args: StatusArgs, identity: str, context: ToolContext) -> ToolResult:
    del args
    record = context.device_for(identity)
    if record is None:
        return ToolResult(
            "Your glasses are not connected.\n\n"
            "To connect:\n"
            "1. Open the Mentra app on your phone\n"
            "2. Connect your glasses\n"
            f'3. Open the "{context.device_app_name}" app'
        )
    return ToolResult(
        "Your glasses are connected.\n\n"
        "Status:\n"
        f"- Buffered transcriptions: {len(record.transcriptions)}\n"
        f"- Buffered events: {len(record.events)}"
    )


SYSTEM_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="glasses_status",
        description="Check if YOUR glasses are connected",
        arguments_model=StatusArgs,
        handler=status,
    ),
)


__all__ = ["SYSTEM_TOOLS", "StatusArgs"]
