from __future__ import annotations

from ..config.models import Settings
from .registry import ToolRegistry
from .builtin_tools.file_read import ReadFileTool
from .builtin_tools.listdir import ListDirTool
from .builtin_tools.file_edit import EditFileTool
from .builtin_tools.bash_tool import BashTool
from .builtin_tools.grep_tool import CodeSearchTool


def build_default_registry(settings: Settings | None = None) -> ToolRegistry:
    settings = settings or Settings()
    return ToolRegistry([
        ReadFileTool(),
        ListDirTool(),
        EditFileTool(),
        BashTool(timeout=settings.bash_timeout),
        CodeSearchTool(),
    ])
