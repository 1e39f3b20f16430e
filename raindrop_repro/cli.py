"""raindrop-repro CLI entrypoint."""

from __future__ import annotations

import os
import signal
import sys
import uuid
from typing import Any, Mapping, Sequence

from .clients import default_registry
from .clients.base import ClientRegistry, EventClient
from .clients.recording import RecordingClient
from .config import WRITE_KEY_ENV, RunConfig, parse_run_config
from .runs.events import EventWriter
from .scenario import print_banner, run_scenario
from .timing import Clock, Stopwatch, clock_for
from .utils import load_dotenv


def require_write_key(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    write_key = str(env.get(WRITE_KEY_ENV) or "").strip()
    if not write_key:
        raise RuntimeError(f"{WRITE_KEY_ENV} environment variable is required")
    return write_key


def build_client(
    config: RunConfig,
    write_key: str,
    clock: Clock,
    registry: ClientRegistry | None = None,
) -> EventClient:
    registry = registry or default_registry()
    name = RecordingClient.name if config.dry_run else "raindrop"
    factory = registry.get(name)
    if factory is None:
        raise RuntimeError(f"Unknown client '{name}'. Available: {', '.join(registry.list())}")
    options: dict[str, Any] = {"debug_logs": True, "redact_pii": True}
    if config.dry_run:
        options.update(flush_after_s=config.dry_run_flush_after_s, now=clock.monotonic)
    return factory(write_key, **options)


def install_interrupt_handler() -> None:
    signal.signal(signal.SIGINT, _handle_sigint)


def _handle_sigint(signum: int, frame: Any) -> None:
    # No atexit hooks run here, so the SDK does not drain its buffers.
    print("\nReceived SIGINT, exiting...", flush=True)
    os._exit(0)


def run(config: RunConfig, *, registry: ClientRegistry | None = None, clock: Clock | None = None) -> int:
    clock = clock or clock_for(config.no_sleeps)
    # Offsets are measured from before the banner and SDK init.
    stopwatch = Stopwatch(clock)
    print_banner(config)
    if config.dry_run:
        write_key = os.getenv(WRITE_KEY_ENV) or "dryrun"
    else:
        write_key = require_write_key()
    client = build_client(config, write_key, clock, registry)
    events = EventWriter(config.events_path, str(uuid.uuid4())) if config.events_path else None
    run_scenario(config, client, clock, events=events, stopwatch=stopwatch)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    install_interrupt_handler()
    try:
        config = parse_run_config(sys.argv[1:] if argv is None else argv)
        return run(config)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
