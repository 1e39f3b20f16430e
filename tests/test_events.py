from __future__ import annotations

import json
from pathlib import Path

from raindrop_repro.runs.events import EventWriter, NullEventWriter


def _read(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_step_event_shape(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    EventWriter(path, "run-123").step("navigation", "Starting navigation", 1.23456)

    (event,) = _read(path)
    assert event["type"] == "step"
    assert event["run_id"] == "run-123"
    assert event["ts"]
    assert (event["label"], event["message"], event["elapsed_s"]) == ("navigation", "Starting navigation", 1.235)


def test_paths_are_serialised_as_strings(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "events.jsonl"
    EventWriter(path, "run-1").emit("run_started", config={"data_dir": tmp_path / "data"})

    (event,) = _read(path)
    assert event["config"]["data_dir"] == str(tmp_path / "data")


def test_events_append_in_order(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    writer = EventWriter(path, "run-1")
    writer.emit("run_started")
    writer.step("close", "Closing client", 0.0)
    writer.emit("run_finished")
    assert [event["type"] for event in _read(path)] == ["run_started", "step", "run_finished"]


def test_null_event_writer_builds_events_without_writing(tmp_path: Path) -> None:
    writer = NullEventWriter()
    event = writer.step("close", "Closing client", 0.5)
    assert event["type"] == "step"
    assert event["label"] == "close"
    assert event["elapsed_s"] == 0.5
    assert not any(tmp_path.iterdir())
