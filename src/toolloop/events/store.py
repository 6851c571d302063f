from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Protocol

from platformdirs import user_data_dir

APP_NAME = "toolloop"


def _events_dir() -> Path:
    root = Path(user_data_dir(APP_NAME))
    d = root / "events"
    d.mkdir(parents=True, exist_ok=True)
    return d


@dataclass
class Event:
    ts: float
    type: str
    data: dict[str, Any]


class EventSink(Protocol):
    def append(self, event_type: str, data: dict[str, Any]) -> None: ...


class NullEventSink:
    def append(self, event_type: str, data: dict[str, Any]) -> None:
        return None


@dataclass
class MemoryEventSink:
    """Keeps events in memory; used by tests to observe the loop."""

    events: list[Event] = field(default_factory=list)

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        self.events.append(Event(ts=time.time(), type=event_type, data=data))

    def of_type(self, event_type: str) -> list[Event]:
        return [e for e in self.events if e.type == event_type]


@dataclass
class EventStore:
    """Simple jsonl event store per session.

    This is intentionally append-only and tolerant of partial corruption.
    """

    session_id: str
    path: Path

    @staticmethod
    def open(session_id: str, directory: Path | None = None) -> "EventStore":
        d = directory if directory is not None else _events_dir()
        d.mkdir(parents=True, exist_ok=True)
        return EventStore(session_id=session_id, path=d / f"{session_id}.jsonl")

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        ev = Event(ts=time.time(), type=event_type, data=data)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(ev.__dict__, ensure_ascii=False, default=str) + "\n")

    def iter_events(self) -> Iterable[Event]:
        if not self.path.exists():
            return []
        out: list[Event] = []
        for line in self.path.read_text(encoding="utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                # a partially written trailing line
                continue
            out.append(Event(ts=float(obj.get("ts", 0.0)), type=str(obj.get("type")), data=obj.get("data") or {}))
        return out
