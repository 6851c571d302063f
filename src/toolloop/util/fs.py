from __future__ import annotations
from pathlib import Path


def resolve_path(cwd: Path, path_str: str) -> Path:
    # No containment check: tools may touch anything the process can.
    p = Path(path_str).expanduser()
    if not p.is_absolute():
        p = cwd / p
    return p.resolve()


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")
