"""Event client base classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence


@dataclass(frozen=True)
class Attachment:
    type: str
    name: str
    value: str
    role: str

    def as_dict(self) -> dict[str, str]:
        return {"type": self.type, "name": self.name, "value": self.value, "role": self.role}


@dataclass(frozen=True)
class BeginRequest:
    event_id: str
    convo_id: str
    event: str
    user_id: str
    input: str
    model: str
    properties: Mapping[str, Any] = field(default_factory=dict)


class Interaction(Protocol):
    def add_attachments(self, attachments: Sequence[Attachment]) -> None:
        ...

    def finish(self, output: str) -> None:
        ...


class EventClient(Protocol):
    name: str

    def begin(self, request: BeginRequest) -> Interaction:
        ...

    def close(self) -> None:
        ...


ClientFactory = Callable[..., EventClient]


class ClientRegistry:
    def __init__(self, factories: Iterable[tuple[str, ClientFactory]]) -> None:
        self._factories = dict(factories)

    def get(self, name: str) -> ClientFactory | None:
        return self._factories.get(name)

    def list(self) -> list[str]:
        return sorted(self._factories.keys())
