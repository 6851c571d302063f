from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolContext, ToolError
from ..schema import make_spec
from ...util.fs import resolve_path, read_text


class EditFileInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(description="The path to the file.")
    old_str: str = Field(description="Text to search for. Must match exactly one place in the file.")
    new_str: str = Field(description="Text to replace old_str with.")


@dataclass
class EditFileTool:
    spec: ToolSpec = make_spec(
        "edit_file",
        "Make edits to a text file.\n\n"
        "Replaces 'old_str' with 'new_str' in the given file. 'old_str' and 'new_str' MUST be "
        "different from each other, and 'old_str' must occur exactly once; include more "
        "surrounding context if it is ambiguous.\n\n"
        "If the file specified with path doesn't exist and 'old_str' is empty, it will be created.",
        EditFileInput,
    )

    def execute(self, ctx: ToolContext, params: EditFileInput) -> str:
        if params.old_str == params.new_str:
            raise ToolError("old_str and new_str must be different")
        p = resolve_path(Path(ctx.cwd), params.path)

        if not p.exists():
            if params.old_str:
                raise ToolError(f"File not found: {params.path}")
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(params.new_str, encoding="utf-8")
            ctx.events.append("edit_file.created", {"path": str(p), "chars": len(params.new_str)})
            return f"Created file {params.path}"
        if not p.is_file():
            raise ToolError(f"Not a file: {params.path}")
        if not params.old_str:
            raise ToolError(f"old_str is empty but {params.path} already exists")

        text = read_text(p)
        count = text.count(params.old_str)
        if count == 0:
            raise ToolError(f"old_str not found in {params.path}")
        if count > 1:
            raise ToolError(
                f"old_str matches {count} times in {params.path}; include more context to make it unique"
            )
        p.write_text(text.replace(params.old_str, params.new_str, 1), encoding="utf-8")
        ctx.events.append("edit_file.replaced", {"path": str(p)})
        return "OK"
