"""Small helpers shared across the server."""

from __future__ import annotations


def to_command_line(cmd_name: str, *args: bytes) -> list[bytes]:
    """Build a command line from a command name and its arguments."""
    return [cmd_name.encode(), *args]