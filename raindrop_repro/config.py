"""Run configuration derived once from argv (and env defaults)."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from .utils import getenv_flag

WRITE_KEY_ENV = "RAINDROP_WRITE_KEY"
USE_REAL_IMAGES_ENV = "RAINDROP_REPRO_USE_REAL_IMAGES"
NO_SLEEPS_ENV = "RAINDROP_REPRO_NO_SLEEPS"


@dataclass(frozen=True)
class RunConfig:
    use_real_images: bool = False
    no_sleeps: bool = False
    data_dir: Path | None = None
    events_path: Path | None = None
    dry_run: bool = False
    dry_run_flush_after_s: float | None = None

    def properties(self) -> dict[str, Any]:
        return {
            "test": True,
            "use_real_images": self.use_real_images,
            "no_sleeps": self.no_sleeps,
        }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="raindrop-repro",
        description="Reproduce dropped attachments on long-running Raindrop interactions",
    )
    parser.add_argument("--use-real-images", action="store_true", help="Load fixture PNGs instead of synthetic ones")
    parser.add_argument("--no-sleeps", action="store_true", help="Collapse all simulated delays to zero")
    parser.add_argument("--data-dir", default=None, help="Fixture directory (default: <repo>/data)")
    parser.add_argument("--events", default=None, help="Append JSONL telemetry to this path")
    parser.add_argument("--dry-run", action="store_true", help="Use the offline recording client")
    parser.add_argument(
        "--dry-run-flush-after",
        dest="dry_run_flush_after",
        type=float,
        default=None,
        help="Seconds of inactivity after which the recording client ships the event early",
    )
    return parser


def parse_run_config(argv: Sequence[str] | None = None) -> RunConfig:
    # Unrecognised arguments are ignored.
    args, _unknown = build_parser().parse_known_args(list(argv) if argv is not None else None)
    return RunConfig(
        use_real_images=bool(args.use_real_images) or getenv_flag(USE_REAL_IMAGES_ENV),
        no_sleeps=bool(args.no_sleeps) or getenv_flag(NO_SLEEPS_ENV),
        data_dir=Path(args.data_dir).expanduser() if args.data_dir else None,
        events_path=Path(args.events).expanduser() if args.events else None,
        dry_run=bool(args.dry_run),
        dry_run_flush_after_s=args.dry_run_flush_after,
    )
