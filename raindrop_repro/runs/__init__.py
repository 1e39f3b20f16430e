"""Run telemetry."""
