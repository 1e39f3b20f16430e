"""Clock abstraction and elapsed-time helpers for the repro transcript."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def monotonic(self) -> float:
        ...

    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    name = "system"

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class NoSleepClock(SystemClock):
    """Real time source whose sleeps return immediately (`--no-sleeps`)."""

    name = "no-sleep"

    def sleep(self, seconds: float) -> None:
        return None


class ManualClock:
    """Virtual clock: sleeping advances time without waiting."""

    name = "manual"

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)


def clock_for(no_sleeps: bool) -> Clock:
    return NoSleepClock() if no_sleeps else SystemClock()


def sleep_step(duration_ms: int, clock: Clock) -> None:
    clock.sleep(max(0, duration_ms) / 1000)


class Stopwatch:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock
        self.origin = clock.monotonic()

    def elapsed(self) -> float:
        return max(0.0, self.clock.monotonic() - self.origin)

    def label(self) -> str:
        return format_elapsed(self.elapsed())


def format_elapsed(seconds: float) -> str:
    return f"+{max(0.0, seconds):.2f}s"
