from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

DEFAULT_SYSTEM_PROMPT = """You are toolloop, a local assistant with access to the host through tools.
Rules:
- Use the provided tools to inspect files and run commands when needed.
- Prefer list_files/code_search/read_file before editing files.
- Do not fabricate file contents or command outputs: use tools.
- Keep tool arguments minimal and correct.
"""

PROVIDER_DEFAULTS: dict[str, dict[str, str]] = {
    "anthropic": {
        "base_url": "https://api.anthropic.com/v1",
        "model": "claude-sonnet-4-5",
        "api_key": "${ANTHROPIC_API_KEY}",
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "model": "gpt-4o",
        "api_key": "${OPENAI_API_KEY}",
    },
}


class ConfigError(RuntimeError):
    pass


@dataclass
class Settings:
    """Runtime settings, loaded from toolloop.yaml.

    Unset model/base_url/api_key fall back to the provider's defaults.
    """

    provider: str = "anthropic"
    model: str = ""
    base_url: str = ""
    api_key: str = ""
    max_tokens: int = 4096
    max_tool_rounds: int = 25
    max_tool_result_chars: int = 12000
    bash_timeout: Optional[float] = None
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    trace: bool = False

    loaded_from: Path | None = None

    def __post_init__(self) -> None:
        defaults = PROVIDER_DEFAULTS.get(self.provider)
        if defaults is None:
            known = ", ".join(sorted(PROVIDER_DEFAULTS))
            raise ConfigError(f"Unknown provider '{self.provider}'. Known providers: {known}")
        self.model = self.model or defaults["model"]
        self.base_url = self.base_url or defaults["base_url"]
        self.api_key = self.api_key or defaults["api_key"]

    @staticmethod
    def from_obj(obj: dict[str, Any]) -> "Settings":
        known = {f.name: f for f in fields(Settings) if f.name != "loaded_from"}
        kwargs: dict[str, Any] = {}
        for k, v in obj.items():
            if k not in known or v is None:
                continue
            kwargs[k] = _coerce(k, v, known[k].type)
        return Settings(**kwargs)


def _coerce(key: str, value: Any, type_name: Any) -> Any:
    t = str(type_name)
    try:
        if t == "bool":
            if isinstance(value, bool):
                return value
            raise ValueError(value)
        if t == "int":
            return int(value)
        if "float" in t:
            return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for '{key}': {value!r}")
    if not isinstance(value, str):
        raise ConfigError(f"Invalid value for '{key}': {value!r}")
    return value
