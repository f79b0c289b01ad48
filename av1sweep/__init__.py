"""Batch AV1 re-encoding driven by genre and resolution heuristics."""

__version__ = "0.1.0"
