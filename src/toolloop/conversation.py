from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence, Union

from .tools.base import ToolResult


class ProtocolError(RuntimeError):
    """An append that would break call/result correlation."""


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    # parsed json; the raw string when the backend sent something undecodable
    arguments: dict[str, Any] | str


@dataclass(frozen=True)
class UserTurn:
    text: str


@dataclass(frozen=True)
class AssistantTurn:
    text: str = ""
    tool_calls: tuple[ToolCall, ...] = ()


@dataclass(frozen=True)
class ToolResultTurn:
    results: tuple[ToolResult, ...]


Turn = Union[UserTurn, AssistantTurn, ToolResultTurn]


@dataclass
class Conversation:
    """Append-only turn sequence replayed to the model on every request.

    Nothing here ever edits or drops a turn. The only structural rule enforced
    is the tool protocol: a tool-result turn must directly follow the assistant
    turn that issued the calls and answer every one of them, in order.
    """

    _turns: list[Turn] = field(default_factory=list)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def append_user(self, text: str) -> UserTurn:
        self._assert_no_pending("user")
        turn = UserTurn(text=text)
        self._turns.append(turn)
        return turn

    def append_assistant(self, text: str, tool_calls: Sequence[ToolCall] = ()) -> AssistantTurn:
        self._assert_no_pending("assistant")
        turn = AssistantTurn(text=text, tool_calls=tuple(tool_calls))
        self._turns.append(turn)
        return turn

    def append_tool_results(self, results: Sequence[ToolResult]) -> ToolResultTurn:
        calls = self.pending_tool_calls()
        if not calls:
            raise ProtocolError("Protocol violation: tool results without preceding assistant tool calls")
        expected = [c.id for c in calls]
        got = [r.call_id for r in results]
        if expected != got:
            raise ProtocolError(
                f"Protocol violation: tool results {got} do not answer tool calls {expected}"
            )
        turn = ToolResultTurn(results=tuple(results))
        self._turns.append(turn)
        return turn

    def pending_tool_calls(self) -> tuple[ToolCall, ...]:
        if not self._turns:
            return ()
        last = self._turns[-1]
        if isinstance(last, AssistantTurn):
            return last.tool_calls
        return ()

    def _assert_no_pending(self, role: str) -> None:
        if self.pending_tool_calls():
            raise ProtocolError(f"Protocol violation: {role} turn appended while tool calls are unanswered")
