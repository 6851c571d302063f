from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..conversation import ToolCall
from ..events.store import EventSink, NullEventSink
from ..util.text import truncate_middle
from .base import ToolContext, ToolError, ToolResult
from .registry import ToolRegistry


def _args_preview(args: Any) -> str:
    if isinstance(args, str):
        s = args
    else:
        s = json.dumps(args, ensure_ascii=False, default=str)
    if len(s) > 2000:
        s = s[:2000] + "... (truncated)"
    return s


def _validation_summary(err: ValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(x) for x in e.get("loc", ())) or "(input)"
        parts.append(f"{loc}: {e.get('msg')}")
    return "; ".join(parts)


class ToolExecutor:
    """Runs one tool call against the registry and always returns a ToolResult.

    Dispatch problems (unknown tool, bad arguments, ToolError) come back with
    is_error set. A command that ran and failed is the tool's business: it
    reports that as ordinary output.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        cwd: str | Path,
        events: EventSink | None = None,
        max_result_chars: int = 12000,
    ) -> None:
        self.registry = registry
        self.cwd = str(cwd)
        self.events = events or NullEventSink()
        self.max_result_chars = max_result_chars

    def execute(self, call: ToolCall) -> ToolResult:
        tool = self.registry.get_optional(call.name)
        if tool is None:
            self.events.append("tool.missing", {"tool": call.name, "tool_call_id": call.id})
            return ToolResult(call.id, f"Tool {call.name} not found.", is_error=True)

        model = tool.spec.input_model
        try:
            if isinstance(call.arguments, str):
                params = model.model_validate_json(call.arguments or "{}")
            else:
                params = model.model_validate(call.arguments or {})
        except ValidationError as e:
            summary = _validation_summary(e)
            self.events.append(
                "tool.invalid_args",
                {"tool": call.name, "tool_call_id": call.id, "error": summary},
            )
            return ToolResult(call.id, f"Invalid arguments for tool {call.name}: {summary}", is_error=True)

        self.events.append(
            "tool.call",
            {"tool": call.name, "tool_call_id": call.id, "args": _args_preview(call.arguments)},
        )

        ctx = ToolContext(cwd=self.cwd, events=self.events)
        t0 = time.perf_counter()
        try:
            res = ToolResult(call.id, tool.execute(ctx, params))
        except ToolError as e:
            res = ToolResult(call.id, str(e), is_error=True)
        except Exception as e:
            res = ToolResult(call.id, f"Tool {call.name} exception: {e}", is_error=True)
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        if len(res.content) > self.max_result_chars:
            res = ToolResult(call.id, truncate_middle(res.content, self.max_result_chars), res.is_error)

        self.events.append(
            "tool.result",
            {
                "tool": call.name,
                "tool_call_id": call.id,
                "is_error": res.is_error,
                "elapsed_ms": elapsed_ms,
                "content_len": len(res.content),
                "content_preview": res.content[:4000],
            },
        )
        return res
