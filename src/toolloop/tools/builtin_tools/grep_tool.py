from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolContext, ToolError
from ..schema import make_spec
from ...util.subprocess import CmdRunner, run_cmd
from ...util.text import truncate_lines

MAX_MATCH_LINES = 50


class CodeSearchInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pattern: str = Field(description="The search pattern or regex to look for")
    path: Optional[str] = Field(None, description="Optional path to search in (file or directory)")
    file_type: Optional[str] = Field(
        None, description="Optional file type to limit search to (e.g., 'go', 'js', 'py')"
    )
    case_sensitive: bool = Field(
        False, description="Whether the search should be case sensitive (default: false)"
    )


@dataclass
class CodeSearchTool:
    spec: ToolSpec = make_spec(
        "code_search",
        "Search for code patterns using ripgrep (rg).\n\n"
        "Use this to find code patterns, function definitions, variable usage, or any text in the codebase.\n"
        "You can search by pattern, file type, or directory.",
        CodeSearchInput,
    )
    runner: CmdRunner = field(default=run_cmd, repr=False)

    def build_args(self, params: CodeSearchInput) -> list[str]:
        args = ["rg", "--line-number", "--with-filename", "--color=never"]
        if not params.case_sensitive:
            args.append("--ignore-case")
        if params.file_type:
            args += ["--type", params.file_type]
        # -e and -- keep a leading dash from being read as a flag
        args += ["-e", params.pattern, "--", params.path or "."]
        return args

    def execute(self, ctx: ToolContext, params: CodeSearchInput) -> str:
        if not params.pattern:
            raise ToolError("pattern is required")

        args = self.build_args(params)
        ctx.events.append("code_search.exec", {"pattern": params.pattern, "args": args})
        try:
            res = self.runner(args, cwd=ctx.cwd)
        except FileNotFoundError:
            raise ToolError("search failed: ripgrep (rg) is not installed")

        # rg exits 1 when nothing matched
        if res.returncode == 1:
            ctx.events.append("code_search.no_matches", {"pattern": params.pattern})
            return "No matches found"
        if res.returncode != 0:
            detail = (res.stderr or res.stdout).strip()
            ctx.events.append("code_search.failed", {"pattern": params.pattern, "exit_code": res.returncode})
            raise ToolError(f"search failed: exit status {res.returncode}: {detail}")

        result = res.stdout.strip()
        lines = result.split("\n")
        ctx.events.append(
            "code_search.matches",
            {"pattern": params.pattern, "count": len(lines), "truncated": len(lines) > MAX_MATCH_LINES},
        )
        return truncate_lines(result, MAX_MATCH_LINES)
