from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from toolloop.conversation import ToolCall
from toolloop.tools.base import ToolError, ToolSpec
from toolloop.tools.builtin import build_default_registry
from toolloop.tools.executor import ToolExecutor
from toolloop.tools.registry import ToolRegistry
from toolloop.tools.schema import make_spec
from toolloop.util.text import truncate_lines


class CountInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    n: int = Field(description="How many lines to produce.")


@dataclass
class LinesTool:
    spec: ToolSpec = make_spec("lines", "Produce n lines.", CountInput)

    def execute(self, ctx, params):
        if params.n < 0:
            raise ToolError("n must not be negative")
        if params.n == 13:
            raise RuntimeError("unlucky")
        return "\n".join(f"line {i}" for i in range(params.n))


def _executor(tmp_path, events=None, **kw):
    return ToolExecutor(ToolRegistry([LinesTool()]), cwd=tmp_path, events=events, **kw)


def test_successful_call(tmp_path, events):
    res = _executor(tmp_path, events).execute(ToolCall("c1", "lines", {"n": 2}))
    assert res.call_id == "c1"
    assert res.content == "line 0\nline 1"
    assert res.is_error is False
    assert [e.type for e in events.events] == ["tool.call", "tool.result"]


def test_unknown_tool_is_error_result(tmp_path, events):
    res = _executor(tmp_path, events).execute(ToolCall("c1", "nope", {}))
    assert res.is_error is True
    assert res.content == "Tool nope not found."
    assert events.of_type("tool.missing")


def test_invalid_arguments_are_error_result(tmp_path, events):
    res = _executor(tmp_path, events).execute(ToolCall("c1", "lines", {"n": "many"}))
    assert res.is_error is True
    assert res.content.startswith("Invalid arguments for tool lines:")
    assert "n" in res.content
    assert events.of_type("tool.invalid_args")


def test_missing_required_argument(tmp_path):
    res = _executor(tmp_path).execute(ToolCall("c1", "lines", {}))
    assert res.is_error is True


def test_raw_json_string_arguments(tmp_path):
    ex = _executor(tmp_path)
    assert ex.execute(ToolCall("c1", "lines", '{"n": 1}')).content == "line 0"
    bad = ex.execute(ToolCall("c2", "lines", "{not json"))
    assert bad.is_error is True


def test_tool_error_and_exception_become_error_results(tmp_path):
    ex = _executor(tmp_path)
    res = ex.execute(ToolCall("c1", "lines", {"n": -1}))
    assert (res.content, res.is_error) == ("n must not be negative", True)
    res = ex.execute(ToolCall("c2", "lines", {"n": 13}))
    assert res.is_error is True
    assert res.content == "Tool lines exception: unlucky"


def test_oversized_result_is_cut(tmp_path):
    res = _executor(tmp_path, max_result_chars=100).execute(ToolCall("c1", "lines", {"n": 500}))
    assert "... (truncated) ..." in res.content
    assert len(res.content) < 200
    assert res.content.startswith("line 0")


def test_truncate_lines_boundary():
    fifty = "\n".join(str(i) for i in range(50))
    assert truncate_lines(fifty) == fifty

    sixty = "\n".join(str(i) for i in range(60))
    out = truncate_lines(sixty)
    lines = out.split("\n")
    assert lines[:50] == [str(i) for i in range(50)]
    assert lines[50] == "... (showing first 50 of 60)"
    assert len(lines) == 51


def test_unknown_argument_is_error_result(tmp_path):
    ex = _executor(tmp_path)
    res = ex.execute(ToolCall("c1", "lines", {"n": 1, "bogus": True}))
    assert res.is_error is True
    assert res.content.startswith("Invalid arguments for tool lines:")
    assert "bogus" in res.content


def test_builtin_tool_rejects_misspelled_argument(tmp_path):
    ex = ToolExecutor(build_default_registry(), cwd=tmp_path)
    res = ex.execute(ToolCall("c1", "list_files", {"path": ".", "bogus": 1}))
    assert res.is_error is True
    assert "Invalid arguments for tool list_files" in res.content
