from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolContext, ToolError
from ..schema import make_spec
from ...util.fs import resolve_path
from ...util.text import truncate_lines

MAX_ENTRIES = 50
SKIP_DIRS = {".git"}


class ListFilesInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(".", description="Optional relative path to list files from. Defaults to the working directory.")
    recursive: bool = Field(False, description="If true, list the whole tree below path.")


@dataclass
class ListDirTool:
    spec: ToolSpec = make_spec(
        "list_files",
        "List files and directories at a given path. Directories end with a slash. "
        "If no path is provided, lists files in the working directory.",
        ListFilesInput,
    )

    def execute(self, ctx: ToolContext, params: ListFilesInput) -> str:
        p = resolve_path(Path(ctx.cwd), params.path)
        if not p.exists():
            raise ToolError(f"Path not found: {params.path}")
        if not p.is_dir():
            raise ToolError(f"Not a directory: {params.path}")

        entries: list[str] = []
        if params.recursive:
            for root, dirs, files in os.walk(p):
                dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
                rel_root = Path(root).relative_to(p)
                for d in dirs:
                    entries.append((rel_root / d).as_posix() + "/")
                for f in sorted(files):
                    entries.append((rel_root / f).as_posix())
            entries.sort()
        else:
            for child in sorted(p.iterdir(), key=lambda x: x.name):
                entries.append(child.name + ("/" if child.is_dir() else ""))

        ctx.events.append("list_files", {"path": str(p), "count": len(entries)})
        if not entries:
            return "(empty)"
        return truncate_lines("\n".join(entries), MAX_ENTRIES)
