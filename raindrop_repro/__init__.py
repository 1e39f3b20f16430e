"""Timed reproduction harness for dropped Raindrop interaction attachments."""
