"""Raindrop SDK client."""

from __future__ import annotations

from typing import Any, Sequence

try:
    import raindrop.analytics as raindrop_sdk  # type: ignore
except Exception:  # pragma: no cover
    raindrop_sdk = None  # type: ignore

from .base import Attachment, BeginRequest


class RaindropInteraction:
    def __init__(self, handle: Any, sdk: Any) -> None:
        self._handle = handle
        self._sdk = sdk

    def add_attachments(self, attachments: Sequence[Attachment]) -> None:
        self._handle.add_attachments([_to_sdk_attachment(self._sdk, item) for item in attachments])

    def finish(self, output: str) -> None:
        self._handle.finish(output=output)


class RaindropClient:
    name = "raindrop"

    def __init__(self, write_key: str, *, debug_logs: bool = True, redact_pii: bool = True) -> None:
        if not write_key:
            raise RuntimeError("RAINDROP_WRITE_KEY environment variable is required")
        if raindrop_sdk is None:
            raise RuntimeError("raindrop-ai package not installed. Run: pip install raindrop-ai")
        self._sdk = raindrop_sdk
        self._sdk.init(write_key)
        # init() has no switches for these; they are module-level setters.
        self._sdk.set_debug_logs(debug_logs)
        self._sdk.set_redact_pii(redact_pii)

    def begin(self, request: BeginRequest) -> RaindropInteraction:
        handle = self._sdk.begin(
            event_id=request.event_id,
            event=request.event,
            user_id=request.user_id,
            input=request.input,
            model=request.model,
            convo_id=request.convo_id,
            properties=dict(request.properties),
        )
        return RaindropInteraction(handle, self._sdk)

    def close(self) -> None:
        # shutdown() flushes pending events and blocks until they are sent.
        self._sdk.flush()
        self._sdk.shutdown()


def _to_sdk_attachment(sdk: Any, attachment: Attachment) -> Any:
    factory = getattr(sdk, "Attachment", None)
    if factory is None:
        return attachment.as_dict()
    return factory(**attachment.as_dict())
