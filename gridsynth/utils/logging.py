"""JSONL event log for synthesis runs."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping


class EventLog:
    """Append-only JSONL writer; one record per line, flushed immediately."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("a", encoding="utf-8")

    def write(self, event_type: str, payload: Mapping[str, Any]) -> None:
        record: Dict[str, Any] = {"type": event_type, "timestamp": time.time()}
        record.update(payload)
        self._handle.write(json.dumps(record) + "\n")
        self._handle.flush()

    def log_step(self, record: Mapping[str, Any]) -> None:
        self.write("step", record)

    def log_run(self, record: Mapping[str, Any]) -> None:
        self.write("run", record)

    def flush(self) -> None:
        self._handle.flush()

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> "EventLog":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_event_log(path: Path | str) -> EventLog:
    return EventLog(path)


def read_events(path: Path | str) -> List[Dict[str, Any]]:
    """Load every record of an event log."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return [json.loads(line) for line in handle if line.strip()]


__all__ = ["EventLog", "open_event_log", "read_events"]
