from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel

from ..events.store import EventSink, NullEventSink


class ToolError(RuntimeError):
    """Raised by a tool body when it cannot proceed at all."""


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]
    parameters: dict[str, Any]   # JSONSchema, see schema.generate_schema


@dataclass
class ToolContext:
    cwd: str
    events: EventSink = field(default_factory=NullEventSink)


class Tool(Protocol):
    spec: ToolSpec
    def execute(self, ctx: ToolContext, params: Any) -> str: ...


@dataclass
class ToolResult:
    call_id: str
    content: str
    is_error: bool = False
