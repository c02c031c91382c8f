"""Tool catalog types and the dispatch boundary for tool calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from glass_gateway.application.session_directory import SessionDirectory
from glass_gateway.domain.hardware_session import HardwareSessionRecord
from glass_gateway.domain.identity import is_wildcard
from glass_gateway.errors import ToolRegistrationError

logger = logging.getLogger("glass_gateway.tools")

NOT_CONNECTED_TEXT = "Your glasses are not connected. Open the app on your glasses to connect."


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Text result of a tool call in MCP ``tools/call`` shape."""

    text: str
    is_error: bool = False

    @classmethod
    def error(cls, text: str) -> ToolResult:
        return cls(text=text, is_error=True)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            payload["isError"] = True
        return payload


@dataclass(frozen=True, slots=True)
class DisplayOptions:
    page_chars: int = 500
    page_delay_seconds: float = 4.0

    def __post_init__(self) -> None:
        if self.page_chars <= 0:
            raise ValueError("page_chars must be positive")
        if self.page_delay_seconds < 0:
            raise ValueError("page_delay_seconds must be non-negative")


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Collaborators available to every tool handler."""

    directory: SessionDirectory
    device_app_name: str
    display: DisplayOptions = field(default_factory=DisplayOptions)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def device_for(self, identity: str) -> HardwareSessionRecord | None:
        return self.directory.get_user_session(identity)


ToolHandler = Callable[[Any, str, ToolContext], Awaitable[ToolResult]]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """A named operation: description, argument model and handler."""

    name: str
    description: str
    arguments_model: type[BaseModel]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        schema = self.arguments_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


class ToolRegistry:
    """Name-keyed catalog; tools are added by registering, never by branching."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> ToolSpec:
        if spec.name in self._tools:
            raise ToolRegistrationError(f"tool {spec.name!r} is already registered")
        self._tools[spec.name] = spec
        return spec

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def catalog(self) -> list[dict[str, Any]]:
        return [spec.describe() for spec in self._tools.values()]

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


class ToolExecutor:
    """Runs tool handlers on behalf of an already-resolved identity.

    Unknown tools, invalid arguments and handler exceptions all come back
    as results flagged ``is_error`` so that one failing call never tears
    down the protocol session.
    """

    def __init__(self, registry: ToolRegistry, context: ToolContext) -> None:
        self._registry = registry
        self._context = context

    async def execute(self, name: str, arguments: Mapping[str, Any] | None, identity: str) -> ToolResult:
        spec = self._registry.get(name)
        if spec is None:
            logger.warning("unknown tool requested", extra={"data": {"tool": name, "identity": identity}})
            return ToolResult.error(f"Unknown tool: {name}")

        if is_wildcard(identity):
            record = self._context.device_for(identity)
            logger.warning(
                "administrative credential invoked tool",
                extra={
                    "data": {
                        "tool": name,
                        "acting_on": record.identity if record is not None else None,
                    }
                },
            )

        try:
            parsed = spec.arguments_model.model_validate(dict(arguments or {}))
            result = await spec.handler(parsed, identity, self._context)
        except Exception as exc:
            logger.exception(
                "tool call failed",
                extra={"data": {"tool": name, "identity": identity}},
            )
            return ToolResult.error(f"Error: {exc}")

        logger.info(
            "tool call completed",
            extra={"data": {"tool": name, "identity": identity, "is_error": result.is_error}},
        )
        return result


__all__ = [
    "NOT_CONNECTED_TEXT",
    "DisplayOptions",
    "ToolContext",
    "ToolExecutor",
    "ToolHandler",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
]
