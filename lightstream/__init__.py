"""Pieces of a lightweight video streamer: HTTP helpers, a worker pool and command-line options."""

__version__ = "0.1.0"