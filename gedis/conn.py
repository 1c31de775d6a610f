"""Client connection state shared between the protocol handler and the database."""

from __future__ import annotations

import socket
import threading
from typing import Any, Optional


class Connection:
    """A client connection: serialised writes plus the selected database index.

    A connection without a socket is detached; writes to it are discarded.
    Such connections are used when commands are replayed from the AOF file.
    """

    def __init__(self, sock: Optional[socket.socket] = None, wait: float = 0.0) -> None:
        self._sock = sock
        self._lock = threading.Lock()
        self._wait = wait
        self.db_index = 0

    @property
    def remote_address(self) -> Any:
        """The peer address of the socket, or ``None`` when detached."""
        if self._sock is None:
            return None
        return self._sock.getpeername()

    def write(self, data: bytes) -> None:
        """Send ``data`` to the client; empty data is not sent at all."""
        if not data or self._sock is None:
            return
        with self._lock:
            self._sock.sendall(data)

    def close(self) -> None:
        """Close the socket, giving an in-flight write up to ``wait`` seconds."""
        if self._wait > 0:
            acquired = self._lock.acquire(timeout=self._wait)
        else:
            acquired = self._lock.acquire(blocking=False)
        try:
            if self._sock is not None:
                self._sock.close()
        finally:
            if acquired:
                self._lock.release()

    def select_db(self, index: int) -> None:
        """Switch the database this client works on."""
        self.db_index = index