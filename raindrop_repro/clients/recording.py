"""Offline recording client.

Stands in for the Raindrop SDK in dry runs and tests. Every call is recorded
in order. With `flush_after_s` set, an interaction left idle for longer than
that is shipped early, the way a timeout-driven batch flush would; any
attachment added afterwards is recorded as dropped rather than delivered.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from .base import Attachment, BeginRequest


@dataclass
class RecordedCall:
    method: str
    event_id: str
    payload: dict[str, Any]
    at: float


@dataclass
class DeliveredEvent:
    event_id: str
    convo_id: str
    event: str
    attachments: list[Attachment] = field(default_factory=list)
    output: str | None = None
    early_flush: bool = False


class RecordingInteraction:
    def __init__(self, client: "RecordingClient", request: BeginRequest) -> None:
        self._client = client
        self.request = request
        self.attachments: list[Attachment] = []
        self.dropped: list[Attachment] = []
        self.output: str | None = None
        self.finished = False
        self.shipped = False
        self._last_activity = client.now()

    def add_attachments(self, attachments: Sequence[Attachment]) -> None:
        if self.finished:
            raise RuntimeError(f"Interaction {self.request.event_id} already finished.")
        self._maybe_ship_early()
        self._client.record("add_attachments", self.request.event_id, attachments=[a.as_dict() for a in attachments])
        if self.shipped:
            self.dropped.extend(attachments)
        else:
            self.attachments.extend(attachments)
        self._last_activity = self._client.now()

    def finish(self, output: str) -> None:
        if self.finished:
            raise RuntimeError(f"Interaction {self.request.event_id} already finished.")
        self._maybe_ship_early()
        self._client.record("finish", self.request.event_id, output=output)
        self.output = output
        self.finished = True
        self._last_activity = self._client.now()

    def _maybe_ship_early(self) -> None:
        limit = self._client.flush_after_s
        if self.shipped or limit is None:
            return
        if self._client.now() - self._last_activity > limit:
            self.shipped = True
            self._client.deliver(self, early_flush=True)


class RecordingClient:
    name = "dryrun"

    def __init__(
        self,
        write_key: str = "",
        *,
        debug_logs: bool = True,
        redact_pii: bool = True,
        flush_after_s: float | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.write_key = write_key
        self.options = {"debug_logs": debug_logs, "redact_pii": redact_pii}
        self.flush_after_s = flush_after_s
        self.now = now or time.monotonic
        self.calls: list[RecordedCall] = []
        self.interactions: list[RecordingInteraction] = []
        self.delivered: list[DeliveredEvent] = []
        self.closed = False

    def begin(self, request: BeginRequest) -> RecordingInteraction:
        if self.closed:
            raise RuntimeError("Client already closed.")
        self.record("begin", request.event_id, convo_id=request.convo_id, event=request.event)
        interaction = RecordingInteraction(self, request)
        self.interactions.append(interaction)
        return interaction

    def close(self) -> None:
        if self.closed:
            return
        self.record("close", "")
        for interaction in self.interactions:
            if not interaction.shipped:
                interaction.shipped = True
                self.deliver(interaction, early_flush=False)
            elif interaction.output is not None:
                # Follow-up carrying the output; attachments already went out.
                self.deliver(interaction, early_flush=False, attachments=[])
        self.closed = True

    def record(self, method: str, event_id: str, **payload: Any) -> None:
        self.calls.append(RecordedCall(method=method, event_id=event_id, payload=payload, at=self.now()))

    def deliver(
        self,
        interaction: RecordingInteraction,
        *,
        early_flush: bool,
        attachments: Sequence[Attachment] | None = None,
    ) -> None:
        self.delivered.append(
            DeliveredEvent(
                event_id=interaction.request.event_id,
                convo_id=interaction.request.convo_id,
                event=interaction.request.event,
                attachments=list(interaction.attachments if attachments is None else attachments),
                output=interaction.output,
                early_flush=early_flush,
            )
        )

    def methods(self) -> list[str]:
        return [call.method for call in self.calls]

    def delivered_attachments(self, event_id: str) -> list[Attachment]:
        out: list[Attachment] = []
        for event in self.delivered:
            if event.event_id == event_id:
                out.extend(event.attachments)
        return out
