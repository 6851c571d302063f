from __future__ import annotations


def truncate_lines(text: str, limit: int = 50) -> str:
    lines = text.split("\n")
    if len(lines) <= limit:
        return text
    return "\n".join(lines[:limit]) + f"\n... (showing first {limit} of {len(lines)})"


def truncate_middle(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    head = text[: max_chars // 2]
    tail = text[-(max_chars // 2):]
    return head + "\n\n... (truncated) ...\n\n" + tail
