from __future__ import annotations

import json
import time
import uuid
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .conversation import Conversation, ToolCall, Turn, UserTurn
from .events.store import EventSink, NullEventSink
from .llm.base import BackendError, ModelBackend, ModelResponse
from .tools.base import ToolResult
from .tools.executor import ToolExecutor
from .tools.registry import ToolRegistry

InputReader = Callable[[], Optional[str]]

EXIT_WORDS = {"exit", "quit"}


def console_reader(console: Console, prompt: str = "[bold blue]You[/bold blue]: ") -> InputReader:
    """Line reader over the console; end of input (or Ctrl-C) reads as None."""
    def read() -> Optional[str]:
        try:
            return console.input(prompt)
        except (EOFError, KeyboardInterrupt):
            return None
    return read


def _ensure_call_ids(calls: Sequence[ToolCall]) -> list[ToolCall]:
    out = []
    for tc in calls:
        if not tc.id:
            tc = ToolCall(id=f"call_{uuid.uuid4().hex[:12]}", name=tc.name, arguments=tc.arguments)
        out.append(tc)
    return out


def _format_args(args) -> str:
    if isinstance(args, str):
        return args
    return json.dumps(args, ensure_ascii=False)


class Agent:
    """The conversation loop: user text in, model turns and tool dispatch out.

    One user message may cause several backend round-trips: every assistant
    turn that requests tools is answered with a single tool-result turn, and
    the model is asked again, until it replies without tool calls or the
    per-message round cap is hit.
    """

    def __init__(
        self,
        backend: ModelBackend,
        read_input: InputReader,
        executor: ToolExecutor,
        registry: ToolRegistry,
        conversation: Conversation | None = None,
        events: EventSink | None = None,
        console: Console | None = None,
        max_tool_rounds: int = 25,
        trace: bool = False,
    ) -> None:
        self.backend = backend
        self.read_input = read_input
        self.executor = executor
        self.registry = registry
        self.conversation = conversation if conversation is not None else Conversation()
        self.events = events or NullEventSink()
        self.console = console or Console()
        self.max_tool_rounds = max_tool_rounds
        self.trace = trace

    def run(self) -> None:
        while True:
            line = self.read_input()
            if line is None:
                break
            text = line.strip()
            if not text:
                continue
            if text.lower() in EXIT_WORDS:
                break
            self.send(text)

    def send(self, text: str) -> str:
        """Run one user message to completion and return the final assistant text.

        Returns "" when the backend call fails; the failure is printed and the
        conversation is left exactly as it was before the failed call.
        """
        pending_user: UserTurn | None = UserTurn(text)
        specs = self.registry.list_specs()
        rounds = 0

        while True:
            turns: tuple[Turn, ...] = self.conversation.turns
            if pending_user is not None:
                turns = turns + (pending_user,)

            response = self._request(turns, specs, rounds)
            if response is None:
                return ""

            if pending_user is not None:
                self.conversation.append_user(pending_user.text)
                pending_user = None

            calls = _ensure_call_ids(response.tool_calls)
            self.conversation.append_assistant(response.text, calls)
            if response.text:
                self.console.print(f"[bold yellow]Assistant[/bold yellow]: {escape(response.text)}")

            if not calls:
                return response.text

            results = [self._dispatch(tc) for tc in calls]
            self.conversation.append_tool_results(results)
            rounds += 1

            if rounds >= self.max_tool_rounds:
                msg = f"Stopped after {rounds} tool rounds without a final answer."
                self.events.append("agent.max_rounds", {"rounds": rounds})
                self.conversation.append_assistant(msg)
                self.console.print(f"[bold red]{msg}[/bold red]")
                return msg

    def _request(self, turns: tuple[Turn, ...], specs, step: int) -> ModelResponse | None:
        self.events.append(
            "llm.request",
            {"step": step, "turns": len(turns), "tools": len(specs)},
        )
        t0 = time.perf_counter()
        try:
            response = self.backend.complete(turns, specs)
        except BackendError as e:
            self.events.append("llm.error", {"step": step, "error": str(e)[:2000]})
            self.console.print(f"[bold red]Error[/bold red]: {escape(str(e))}")
            return None
        self.events.append(
            "llm.response",
            {
                "step": step,
                "elapsed_ms": int((time.perf_counter() - t0) * 1000),
                "text": response.text[:4000],
                "tool_calls": [
                    {"id": tc.id, "name": tc.name, "arguments": tc.arguments}
                    for tc in response.tool_calls
                ],
            },
        )
        return response

    def _dispatch(self, call: ToolCall) -> ToolResult:
        self.console.print(f"[bold green]tool[/bold green]: {escape(call.name)}({escape(_format_args(call.arguments))})")
        res = self.executor.execute(call)
        if self.trace:
            self.console.print(
                Panel.fit(
                    escape(res.content[:1200] + ("..." if len(res.content) > 1200 else "")),
                    title=f"tool:{call.name} ({'error' if res.is_error else 'ok'})",
                    border_style="red" if res.is_error else "green",
                )
            )
        return res
