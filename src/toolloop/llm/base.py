from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from ..conversation import ToolCall, Turn
from ..tools.base import ToolSpec


class BackendError(RuntimeError):
    """Anything that went wrong talking to the model backend."""


@dataclass
class ModelResponse:
    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)


class ModelBackend(Protocol):
    def complete(self, turns: Sequence[Turn], tools: Sequence[ToolSpec]) -> ModelResponse: ...


def decode_arguments(raw: Any) -> dict[str, Any] | str:
    """Parse tool-call arguments; hand back the raw text if it isn't a JSON object."""
    if isinstance(raw, dict):
        return raw
    if raw is None or raw == "":
        return {}
    if not isinstance(raw, str):
        return json.dumps(raw)
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    return obj if isinstance(obj, dict) else raw


def post_json(url: str, payload: dict[str, Any], headers: dict[str, str], timeout: float = 120) -> dict[str, Any]:
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        url, data=data, headers={"Content-Type": "application/json", **headers}, method="POST"
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        body = e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else ""
        raise BackendError(f"Provider HTTPError {e.code}: {e.reason}\n{body}")
    except urllib.error.URLError as e:
        raise BackendError(f"Provider URLError: {e}")
    except (TimeoutError, ConnectionError) as e:
        raise BackendError(f"Provider connection error: {e}")
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BackendError(f"Provider returned invalid JSON: {e}")
    if not isinstance(obj, dict):
        raise BackendError("Provider returned a non-object response")
    return obj
