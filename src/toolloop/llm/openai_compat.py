from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any, Sequence

from ..conversation import AssistantTurn, ToolCall, ToolResultTurn, Turn, UserTurn
from ..tools.base import ToolSpec
from .base import BackendError, ModelResponse, decode_arguments, post_json


def tool_specs_to_openai(specs: Sequence[ToolSpec]) -> list[dict[str, Any]]:
    out = []
    for spec in specs:
        out.append({
            "type": "function",
            "function": {
                "name": spec.name,
                "description": spec.description,
                "parameters": spec.parameters,
            },
        })
    return out


def turns_to_openai(turns: Sequence[Turn], system_prompt: str = "") -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    for turn in turns:
        if isinstance(turn, UserTurn):
            messages.append({"role": "user", "content": turn.text})
        elif isinstance(turn, AssistantTurn):
            # content can be null in OpenAI-compatible APIs when tool_calls are present
            msg: dict[str, Any] = {"role": "assistant", "content": turn.text or None}
            if turn.tool_calls:
                msg["tool_calls"] = [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.name,
                            "arguments": tc.arguments if isinstance(tc.arguments, str)
                            else json.dumps(tc.arguments, ensure_ascii=False),
                        },
                    }
                    for tc in turn.tool_calls
                ]
            else:
                msg["content"] = turn.text
            messages.append(msg)
        elif isinstance(turn, ToolResultTurn):
            for r in turn.results:
                messages.append({"role": "tool", "tool_call_id": r.call_id, "content": r.content})
    return messages


def _unexpected(obj: Any) -> BackendError:
    return BackendError(f"Unexpected provider response: {json.dumps(obj, default=str)[:2000]}")


def parse_openai_response(obj: dict[str, Any]) -> ModelResponse:
    try:
        msg = obj["choices"][0]["message"]
    except (KeyError, IndexError, TypeError):
        raise _unexpected(obj)
    if not isinstance(msg, dict):
        raise _unexpected(obj)
    content = msg.get("content") or ""
    tool_calls = msg.get("tool_calls") or []
    if not isinstance(content, str) or not isinstance(tool_calls, list):
        raise _unexpected(obj)

    resp = ModelResponse(text=content)
    for tc in tool_calls:
        fn = tc.get("function") if isinstance(tc, dict) else None
        if not isinstance(fn, dict):
            raise _unexpected(obj)
        resp.tool_calls.append(ToolCall(
            id=str(tc.get("id") or f"call_{uuid.uuid4().hex[:12]}"),
            name=str(fn.get("name") or ""),
            arguments=decode_arguments(fn.get("arguments")),
        ))
    return resp


@dataclass
class OpenAICompatProvider:
    """
    Minimal OpenAI-compatible Chat Completions client.
    Works with OpenAI and many compatible gateways (OpenRouter, vLLM, LM Studio, etc.)
    """
    model: str
    base_url: str
    api_key: str
    system_prompt: str = ""
    max_tokens: int = 4096
    timeout: float = 120

    def complete(self, turns: Sequence[Turn], tools: Sequence[ToolSpec]) -> ModelResponse:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": turns_to_openai(turns, self.system_prompt),
            "max_tokens": self.max_tokens,
        }
        if tools:
            payload["tools"] = tool_specs_to_openai(tools)
            payload["tool_choice"] = "auto"

        url = self.base_url.rstrip("/") + "/chat/completions"
        obj = post_json(url, payload, {"Authorization": f"Bearer {self.api_key}"}, timeout=self.timeout)
        return parse_openai_response(obj)
