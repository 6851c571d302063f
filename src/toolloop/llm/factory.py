from __future__ import annotations

from ..config.loader import resolve_api_key
from ..config.models import ConfigError, Settings
from .anthropic import AnthropicProvider
from .base import ModelBackend
from .openai_compat import OpenAICompatProvider


def build_provider(settings: Settings) -> ModelBackend:
    """Construct the backend client; raises ConfigError when credentials are missing."""
    api_key = resolve_api_key(settings)
    kind = settings.provider.strip().lower()
    if kind == "anthropic":
        cls = AnthropicProvider
    elif kind == "openai":
        cls = OpenAICompatProvider
    else:
        raise ConfigError(f"Unknown provider '{settings.provider}'.")
    return cls(
        model=settings.model,
        base_url=settings.base_url,
        api_key=api_key,
        system_prompt=settings.system_prompt,
        max_tokens=settings.max_tokens,
    )
