"""A line echo handler and the TCP listener factory."""

from __future__ import annotations

import logging
import socket
import threading

from gedis.config import Config

logger = logging.getLogger(__name__)


class EchoHandler:
    """Sends every received line back to the client."""

    def __init__(self) -> None:
        self._closing = threading.Event()
        self._lock = threading.Lock()
        self._sockets: set[socket.socket] = set()

    def handle(self, stop_event: threading.Event, sock: socket.socket) -> None:
        """Echo lines until the peer closes or the server stops."""
        if self._closing.is_set():
            sock.close()
            return
        with self._lock:
            self._sockets.add(sock)
        try:
            with sock, sock.makefile("rb") as stream:
                while not stop_event.is_set():
                    try:
                        line = stream.readline()
                    except (OSError, ValueError) as exc:
                        logger.warning("read failed: %s", exc)
                        return
                    if not line.endswith(b"\n"):
                        return
                    try:
                        sock.sendall(line)
                    except OSError as exc:
                        logger.warning("write failed: %s", exc)
                        return
        finally:
            with self._lock:
                self._sockets.discard(sock)

    def close(self) -> None:
        """Refuse new connections and end the open ones."""
        self._closing.set()
        with self._lock:
            sockets = list(self._sockets)
        for sock in sockets:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass


def _split_address(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not port:
        return host, 0
    if not port.isdigit() or int(port) > 65535:
        raise ValueError(f"invalid port in address {addr!r}")
    return host, int(port)


def must_listen(config: Config) -> socket.socket:
    """Open a listening TCP socket on the configured ``host:port`` address."""
    host, port = _split_address(config.tcp.addr)
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family)