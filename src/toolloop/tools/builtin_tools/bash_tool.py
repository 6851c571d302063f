from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..base import ToolSpec, ToolContext, ToolError
from ..schema import make_spec
from ...util.subprocess import CmdRunner, run_cmd


class BashInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    command: str = Field(description="The bash command to execute.")


@dataclass
class BashTool:
    spec: ToolSpec = make_spec(
        "bash",
        "Execute a bash command and return its output. Use this to run shell commands.",
        BashInput,
    )
    timeout: Optional[float] = None
    runner: CmdRunner = field(default=run_cmd, repr=False)

    def execute(self, ctx: ToolContext, params: BashInput) -> str:
        cmd = params.command.strip()
        if not cmd:
            raise ToolError("command is required")

        ctx.events.append("bash.exec", {"command": cmd})
        res = self.runner(["bash", "-c", cmd], cwd=ctx.cwd, timeout=self.timeout, combine_output=True)

        if res.timed_out:
            ctx.events.append("bash.timeout", {"command": cmd, "timeout": self.timeout})
            return f"Command timed out after {self.timeout}s\nOutput: {res.stdout}"
        if res.returncode != 0:
            ctx.events.append("bash.failed", {"command": cmd, "exit_code": res.returncode})
            return f"Command failed with error: exit status {res.returncode}\nOutput: {res.stdout}"

        ctx.events.append("bash.ok", {"command": cmd, "output_chars": len(res.stdout)})
        return res.stdout.strip()
