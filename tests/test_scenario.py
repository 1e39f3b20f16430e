from __future__ import annotations

import io
import json
import time
from pathlib import Path

import pytest

from raindrop_repro.clients.recording import RecordingClient
from raindrop_repro.config import RunConfig
from raindrop_repro.scenario import STEP_LABELS, run_scenario
from raindrop_repro.timing import ManualClock, NoSleepClock, Stopwatch


def _ids():
    counter = iter(range(1, 100))
    return lambda: f"id-{next(counter)}"


def test_no_sleeps_run_is_fast_and_ordered() -> None:
    client = RecordingClient()
    stream = io.StringIO()
    start = time.monotonic()
    result = run_scenario(RunConfig(no_sleeps=True), client, NoSleepClock(), stream=stream)

    assert time.monotonic() - start < 5.0
    assert result.steps == STEP_LABELS
    assert result.attachments_sent == 2
    assert client.methods() == ["begin", "add_attachments", "add_attachments", "finish", "close"]


def test_step_sequence_is_timing_invariant() -> None:
    fast = run_scenario(RunConfig(no_sleeps=True), RecordingClient(), NoSleepClock(), stream=io.StringIO())
    clock = ManualClock()
    slow = run_scenario(RunConfig(), RecordingClient(now=clock.monotonic), clock, stream=io.StringIO())

    assert fast.steps == slow.steps
    assert clock.sleeps == [1.96, 0.38, 7.29, 0.02]
    assert slow.elapsed_s == pytest.approx(9.65)


def test_attachments_are_input_then_output() -> None:
    client = RecordingClient()
    run_scenario(RunConfig(no_sleeps=True), client, NoSleepClock(), stream=io.StringIO())

    attach_calls = [call for call in client.calls if call.method == "add_attachments"]
    assert len(attach_calls) == 2
    first, second = (call.payload["attachments"] for call in attach_calls)
    assert [(a["role"], a["name"], a["type"]) for a in first] == [("input", "screenshot", "image")]
    assert [(a["role"], a["name"], a["type"]) for a in second] == [("output", "click_target", "image")]
    assert first[0]["value"].startswith("data:image/png;base64,")


def test_finish_called_once_after_attachments_with_click_payload() -> None:
    client = RecordingClient()
    run_scenario(RunConfig(no_sleeps=True), client, NoSleepClock(), stream=io.StringIO())

    methods = client.methods()
    assert methods.count("finish") == 1
    assert methods.index("finish") > max(i for i, m in enumerate(methods) if m == "add_attachments")
    finish_call = next(call for call in client.calls if call.method == "finish")
    assert json.loads(finish_call.payload["output"]) == {"type": "click", "x": 1730, "y": 157}


def test_begin_carries_identifiers_and_metadata() -> None:
    client = RecordingClient()
    result = run_scenario(
        RunConfig(no_sleeps=True), client, NoSleepClock(), stream=io.StringIO(), id_factory=_ids()
    )

    assert (result.event_id, result.convo_id) == ("id-1", "id-2")
    request = client.interactions[0].request
    assert request.event == "bug_repro_test"
    assert request.user_id == "test-user"
    assert request.model == "test-model"
    assert request.convo_id == "id-2"
    assert request.properties == {"test": True, "use_real_images": False, "no_sleeps": True}


def test_generated_ids_are_unique() -> None:
    first = run_scenario(RunConfig(no_sleeps=True), RecordingClient(), NoSleepClock(), stream=io.StringIO())
    second = run_scenario(RunConfig(no_sleeps=True), RecordingClient(), NoSleepClock(), stream=io.StringIO())
    assert len({first.event_id, first.convo_id, second.event_id, second.convo_id}) == 4


def test_transcript_lines_carry_elapsed_time() -> None:
    clock = ManualClock()
    stream = io.StringIO()
    result = run_scenario(RunConfig(), RecordingClient(now=clock.monotonic), clock, stream=stream)
    text = stream.getvalue()

    assert "[TIMING +0.00s] Starting navigation" in text
    assert "[TIMING +1.96s] Navigation complete" in text
    assert "[TIMING +9.63s] Model completion finished" in text
    assert "EXPECTED: Final event should have 2 attachments" in text
    assert "ACTUAL: Final event likely has only 1 attachment" in text
    assert result.event_id in text


def test_missing_fixture_aborts_before_any_attachment(tmp_path: Path) -> None:
    client = RecordingClient()
    config = RunConfig(use_real_images=True, no_sleeps=True, data_dir=tmp_path)

    with pytest.raises(FileNotFoundError):
        run_scenario(config, client, NoSleepClock(), stream=io.StringIO())

    assert client.methods() == ["begin"]
    assert client.closed is False


def test_simulated_timeout_flush_loses_output_attachment() -> None:
    clock = ManualClock()
    client = RecordingClient(flush_after_s=5.0, now=clock.monotonic)
    result = run_scenario(RunConfig(), client, clock, stream=io.StringIO())

    delivered = client.delivered_attachments(result.event_id)
    assert result.attachments_sent == 2
    assert [a.role for a in delivered] == ["input"]
    assert client.delivered[0].early_flush is True


def test_client_errors_propagate_unchanged() -> None:
    class ExplodingClient(RecordingClient):
        def close(self) -> None:
            raise ConnectionError("ingest unreachable")

    with pytest.raises(ConnectionError, match="ingest unreachable"):
        run_scenario(RunConfig(no_sleeps=True), ExplodingClient(), NoSleepClock(), stream=io.StringIO())


def test_offsets_use_callers_stopwatch() -> None:
    clock = ManualClock()
    stopwatch = Stopwatch(clock)
    clock.sleep(0.5)
    stream = io.StringIO()

    result = run_scenario(RunConfig(), RecordingClient(now=clock.monotonic), clock, stream=stream, stopwatch=stopwatch)

    assert "[TIMING +0.50s] Starting navigation" in stream.getvalue()
    assert result.elapsed_s == pytest.approx(10.15)
