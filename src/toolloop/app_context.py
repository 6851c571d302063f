from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from .agent import Agent, InputReader, console_reader
from .config.loader import load_settings
from .config.models import Settings
from .events.store import EventStore
from .llm.base import ModelBackend
from .llm.factory import build_provider
from .tools.builtin import build_default_registry
from .tools.executor import ToolExecutor
from .tools.registry import ToolRegistry


@dataclass
class AppContext:
    cwd: Path
    settings: Settings
    provider: ModelBackend
    tools: ToolRegistry
    events: EventStore
    console: Console

    @staticmethod
    def from_env(
        cwd: Path,
        config_path: Path | None = None,
        session_id: str | None = None,
        console: Console | None = None,
    ) -> "AppContext":
        """Build everything the agent needs; ConfigError or DuplicateToolError here is fatal."""
        settings = load_settings(cwd=cwd, explicit_path=config_path)
        provider = build_provider(settings)
        tools = build_default_registry(settings)
        events = EventStore.open(session_id or uuid.uuid4().hex[:12])
        return AppContext(
            cwd=cwd,
            settings=settings,
            provider=provider,
            tools=tools,
            events=events,
            console=console or Console(),
        )

    def build_agent(self, read_input: InputReader | None = None) -> Agent:
        executor = ToolExecutor(
            self.tools,
            cwd=self.cwd,
            events=self.events,
            max_result_chars=self.settings.max_tool_result_chars,
        )
        return Agent(
            backend=self.provider,
            read_input=read_input or console_reader(self.console),
            executor=executor,
            registry=self.tools,
            events=self.events,
            console=self.console,
            max_tool_rounds=self.settings.max_tool_rounds,
            trace=self.settings.trace,
        )
