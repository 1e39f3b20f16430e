"""Client registry."""

from __future__ import annotations

from .base import ClientRegistry
from .raindrop import RaindropClient
from .recording import RecordingClient


def default_registry() -> ClientRegistry:
    return ClientRegistry(
        [
            (RaindropClient.name, RaindropClient),
            (RecordingClient.name, RecordingClient),
        ]
    )
