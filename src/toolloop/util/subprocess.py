from __future__ import annotations
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence, Optional


@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False


def run_cmd(
    cmd: Sequence[str],
    cwd: str,
    timeout: Optional[float] = None,
    *,
    combine_output: bool = False,
) -> CmdResult:
    """Run a command without a shell and capture its output as text.

    With combine_output, stderr is interleaved into stdout the way a terminal
    would show it. A timeout is reported through CmdResult.timed_out rather
    than raised.
    """
    try:
        p = subprocess.run(
            list(cmd),
            cwd=cwd,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if combine_output else subprocess.PIPE,
            timeout=timeout,
            shell=False,
            errors="replace",
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout or ""
        if isinstance(partial, bytes):
            partial = partial.decode("utf-8", errors="replace")
        return CmdResult(-1, partial, "", timed_out=True)
    return CmdResult(p.returncode, p.stdout or "", p.stderr or "")


CmdRunner = Callable[..., CmdResult]
