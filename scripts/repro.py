#!/usr/bin/env python3
"""Raindrop attachment repro

Runs the timed two-attachment scenario against the Raindrop SDK and prints a
timestamped transcript.

Examples:
  RAINDROP_WRITE_KEY=... python scripts/repro.py
  RAINDROP_WRITE_KEY=... python scripts/repro.py --use-real-images
  python scripts/repro.py --dry-run --no-sleeps --dry-run-flush-after 5
"""

from __future__ import annotations

import sys

from raindrop_repro.cli import main


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
