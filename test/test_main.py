from typer.testing import CliRunner

from toolloop import app_context
from toolloop.main import app
from toolloop.tools.registry import DuplicateToolError

runner = CliRunner()


def test_tools_command_lists_schemas():
    result = runner.invoke(app, ["tools"])
    assert result.exit_code == 0
    for name in ("read_file", "list_files", "edit_file", "bash", "code_search"):
        assert name in result.output


def test_missing_credentials_exit_nonzero(tmp_path, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    result = runner.invoke(app, ["repl", "--cwd", str(tmp_path)], input="")
    assert result.exit_code == 1
    assert "ANTHROPIC_API_KEY" in result.output


def test_duplicate_tool_names_exit_nonzero(tmp_path, monkeypatch):
    def duplicate(settings=None):
        raise DuplicateToolError("Tool already registered: read_file")

    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr(app_context, "build_default_registry", duplicate)
    result = runner.invoke(app, ["run", "--cwd", str(tmp_path), "-p", "hello"])
    assert result.exit_code == 1
    assert "Error: Tool already registered: read_file" in result.output
    assert not isinstance(result.exception, DuplicateToolError)
