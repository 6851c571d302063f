"""Shared fixtures: a scripted model backend and a quiet console."""

from __future__ import annotations

import io
from typing import Iterable, Sequence

import pytest
from rich.console import Console

from toolloop.agent import Agent
from toolloop.conversation import ToolCall
from toolloop.events.store import MemoryEventSink
from toolloop.llm.base import BackendError, ModelResponse
from toolloop.tools.builtin import build_default_registry
from toolloop.tools.executor import ToolExecutor


class ScriptedBackend:
    """Replays canned responses (or raises canned errors) in order."""

    def __init__(self, script: Iterable[ModelResponse | Exception]):
        self.script = list(script)
        self.requests: list[tuple] = []

    def complete(self, turns: Sequence, tools: Sequence) -> ModelResponse:
        self.requests.append((tuple(turns), tuple(t.name for t in tools)))
        if not self.script:
            raise BackendError("script exhausted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeResponse(io.BytesIO):
    """Stands in for the urlopen response context manager."""

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def reply(text: str) -> ModelResponse:
    return ModelResponse(text=text)


def call(name: str, call_id: str = "call_1", text: str = "", **arguments) -> ModelResponse:
    return ModelResponse(text=text, tool_calls=[ToolCall(id=call_id, name=name, arguments=arguments)])


def line_reader(lines: Iterable[str]):
    it = iter(lines)
    return lambda: next(it, None)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), force_terminal=False, width=200)


@pytest.fixture
def events():
    return MemoryEventSink()


@pytest.fixture
def make_agent(tmp_path, console, events):
    def _make(script, lines=(), **kwargs):
        registry = kwargs.pop("registry", None) or build_default_registry()
        executor = ToolExecutor(registry, cwd=tmp_path, events=events)
        backend = ScriptedBackend(script)
        agent = Agent(
            backend=backend,
            read_input=line_reader(lines),
            executor=executor,
            registry=registry,
            events=events,
            console=console,
            **kwargs,
        )
        return agent, backend
    return _make


def console_text(console: Console) -> str:
    return console.file.getvalue()
