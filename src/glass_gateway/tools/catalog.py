"""Builds the fixed tool catalog."""

from __future__ import annotations

from glass_gateway.tools.audio import AUDIO_TOOLS
from glass_gateway.tools.display import DISPLAY_TOOLS
from glass_gateway.tools.input import INPUT_TOOLS
from glass_gateway.tools.registry import ToolRegistry
from glass_gateway.tools.system import SYSTEM_TOOLS

ALL_TOOLS = (*DISPLAY_TOOLS, *AUDIO_TOOLS, *INPUT_TOOLS, *SYSTEM_TOOLS)


def build_tool_registry() -> ToolRegistry:
    registry = ToolRegistry()
    for spec in ALL_TOOLS:
        registry.register(spec)
    return registry


__all__ = ["ALL_TOOLS", "build_tool_registry"]
