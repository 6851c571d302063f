from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolContext, ToolError
from ..schema import make_spec
from ...util.fs import resolve_path, read_text


class ReadFileInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(description="The relative path of a file in the working directory.")


@dataclass
class ReadFileTool:
    spec: ToolSpec = make_spec(
        "read_file",
        "Read the contents of a given relative file path. Use this when you want to see "
        "what's inside a file. Do not use this with directory names.",
        ReadFileInput,
    )

    def execute(self, ctx: ToolContext, params: ReadFileInput) -> str:
        p = resolve_path(Path(ctx.cwd), params.path)
        if not p.is_file():
            raise ToolError(f"File not found: {params.path}")
        ctx.events.append("read_file", {"path": str(p)})
        return read_text(p)
