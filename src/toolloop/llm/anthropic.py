from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from ..conversation import AssistantTurn, ToolCall, ToolResultTurn, Turn, UserTurn
from ..tools.base import ToolSpec
from .base import BackendError, ModelResponse, decode_arguments, post_json

ANTHROPIC_VERSION = "2023-06-01"


def tool_specs_to_anthropic(specs: Sequence[ToolSpec]) -> list[dict[str, Any]]:
    return [
        {"name": s.name, "description": s.description, "input_schema": s.parameters}
        for s in specs
    ]


def _tool_input(arguments: dict[str, Any] | str) -> dict[str, Any]:
    # tool_use.input must be an object; undecodable arguments are replayed as {}
    return arguments if isinstance(arguments, dict) else {}


def turns_to_anthropic(turns: Sequence[Turn]) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for turn in turns:
        if isinstance(turn, UserTurn):
            messages.append({"role": "user", "content": [{"type": "text", "text": turn.text}]})
        elif isinstance(turn, AssistantTurn):
            blocks: list[dict[str, Any]] = []
            if turn.text:
                blocks.append({"type": "text", "text": turn.text})
            for tc in turn.tool_calls:
                blocks.append({"type": "tool_use", "id": tc.id, "name": tc.name, "input": _tool_input(tc.arguments)})
            if not blocks:
                # the API rejects empty assistant content
                continue
            messages.append({"role": "assistant", "content": blocks})
        elif isinstance(turn, ToolResultTurn):
            messages.append({
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": r.call_id, "content": r.content, "is_error": r.is_error}
                    for r in turn.results
                ],
            })
    return messages


def parse_anthropic_response(obj: dict[str, Any]) -> ModelResponse:
    content = obj.get("content")
    if not isinstance(content, list):
        raise BackendError(f"Unexpected provider response: {json.dumps(obj, default=str)[:2000]}")

    texts: list[str] = []
    resp = ModelResponse()
    for block in content:
        if not isinstance(block, dict):
            raise BackendError(f"Unexpected provider response: {json.dumps(obj, default=str)[:2000]}")
        kind = block.get("type")
        if kind == "text":
            texts.append(block.get("text") or "")
        elif kind == "tool_use":
            resp.tool_calls.append(ToolCall(
                id=str(block.get("id") or ""),
                name=str(block.get("name") or ""),
                arguments=decode_arguments(block.get("input")),
            ))
    resp.text = "".join(texts)
    return resp


@dataclass
class AnthropicProvider:
    """Anthropic Messages API client over plain urllib."""
    model: str
    base_url: str
    api_key: str
    system_prompt: str = ""
    max_tokens: int = 4096
    timeout: float = 120

    def complete(self, turns: Sequence[Turn], tools: Sequence[ToolSpec]) -> ModelResponse:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": turns_to_anthropic(turns),
        }
        if self.system_prompt:
            payload["system"] = self.system_prompt
        if tools:
            payload["tools"] = tool_specs_to_anthropic(tools)

        url = self.base_url.rstrip("/") + "/messages"
        headers = {"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION}
        obj = post_json(url, payload, headers, timeout=self.timeout)
        if obj.get("type") == "error":
            err = obj.get("error") or {}
            raise BackendError(f"Provider error {err.get('type')}: {err.get('message')}")
        return parse_anthropic_response(obj)
