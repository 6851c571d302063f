from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from .models import ConfigError, Settings

APP_NAME = "toolloop"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level (higher priority)
    return [
        cwd / ".toolloop.yaml",
        cwd / "toolloop.yaml",
    ]


def _global_candidate_paths() -> list[Path]:
    return [Path(user_config_dir(APP_NAME)) / "toolloop.yaml"]


def _load_yaml(p: Path) -> dict[str, Any]:
    try:
        obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}")
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError(f"{p} must contain a mapping at the top level.")
    return obj


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)
        else:
            out[k] = v
    return out


def load_settings(
    *,
    cwd: Path,
    explicit_path: Path | None = None,
    global_paths: list[Path] | None = None,
) -> Settings:
    """Load settings.

    Merge order: global < project < explicit_path.
    """
    merged: dict[str, Any] = {}
    loaded_from: Path | None = None

    for p in (_global_candidate_paths() if global_paths is None else global_paths):
        if p.is_file():
            merged = _merge_dicts(merged, _load_yaml(p))
            loaded_from = p

    for p in _candidate_paths(cwd):
        if p.is_file():
            merged = _merge_dicts(merged, _load_yaml(p))
            loaded_from = p
            break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if not p.is_file():
            raise ConfigError(f"Config YAML not found: {p}")
        merged = _merge_dicts(merged, _load_yaml(p))
        loaded_from = p

    settings = Settings.from_obj(merged)
    settings.loaded_from = loaded_from
    return settings


def _expand_env_placeholders(s: str) -> str:
    def repl(m: re.Match) -> str:
        var = m.group(1)
        val = os.getenv(var)
        if not val:
            raise ConfigError(f"API key placeholder '${{{var}}}' not found in environment or is empty.")
        return val

    return _ENV_PATTERN.sub(repl, s)


def resolve_api_key(settings: Settings) -> str:
    api_key = _expand_env_placeholders(settings.api_key).strip()
    if not api_key:
        raise ConfigError(f"No API key configured for provider '{settings.provider}'.")
    return api_key
