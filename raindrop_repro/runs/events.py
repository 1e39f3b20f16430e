"""Append-only JSONL telemetry for a repro run.

One line per event: `run_started`, a `step` per transcript step label, then
`run_finished`. Every line carries `type`, `run_id` and `ts`.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from ..utils import now_utc_iso


@dataclass
class EventWriter:
    path: Path
    run_id: str
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, init=False)

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        event = _build_event(event_type, self.run_id, payload)
        line = json.dumps(event, default=_jsonable)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(f"{line}\n")
        return event

    def step(self, label: str, message: str, elapsed_s: float) -> dict[str, Any]:
        return self.emit("step", label=label, message=message, elapsed_s=round(elapsed_s, 3))


class NullEventWriter(EventWriter):
    """Used when no `--events` path is configured; builds events, writes nothing."""

    def __init__(self) -> None:
        super().__init__(Path("/dev/null"), "")

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        return _build_event(event_type, self.run_id, payload)


def _build_event(event_type: str, run_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    event: dict[str, Any] = {"type": event_type, "run_id": run_id, "ts": now_utc_iso()}
    event.update(payload)
    return event


def _jsonable(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
