"""A small key-value server speaking RESP, with append-only file persistence."""

__version__ = "0.1.0"