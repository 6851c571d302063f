import pytest

from toolloop.conversation import (
    AssistantTurn,
    Conversation,
    ProtocolError,
    ToolCall,
    ToolResultTurn,
    UserTurn,
)
from toolloop.tools.base import ToolResult


def _calls(*ids):
    return [ToolCall(i, "bash", {"command": "true"}) for i in ids]


def test_append_only_sequence():
    conv = Conversation()
    conv.append_user("hi")
    conv.append_assistant("hello")
    assert conv.turns == (UserTurn("hi"), AssistantTurn("hello"))
    snapshot = conv.turns
    conv.append_user("again")
    assert len(snapshot) == 2
    assert len(conv) == 3


def test_results_must_answer_every_call_in_order():
    conv = Conversation()
    conv.append_user("go")
    conv.append_assistant("", _calls("a", "b"))
    assert [c.id for c in conv.pending_tool_calls()] == ["a", "b"]

    with pytest.raises(ProtocolError):
        conv.append_tool_results([ToolResult("a", "ok")])
    with pytest.raises(ProtocolError):
        conv.append_tool_results([ToolResult("b", "ok"), ToolResult("a", "ok")])
    with pytest.raises(ProtocolError):
        conv.append_tool_results([ToolResult("a", "ok"), ToolResult("b", "ok"), ToolResult("c", "x")])

    turn = conv.append_tool_results([ToolResult("a", "ok"), ToolResult("b", "ok")])
    assert isinstance(turn, ToolResultTurn)
    assert conv.pending_tool_calls() == ()


def test_results_without_calls_are_rejected():
    conv = Conversation()
    conv.append_user("go")
    with pytest.raises(ProtocolError):
        conv.append_tool_results([ToolResult("a", "orphan")])


def test_no_new_turns_while_calls_are_pending():
    conv = Conversation()
    conv.append_assistant("", _calls("a"))
    with pytest.raises(ProtocolError):
        conv.append_user("next")
    with pytest.raises(ProtocolError):
        conv.append_assistant("more")
