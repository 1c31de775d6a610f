"""Connection handler speaking RESP to clients."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any, Optional, Protocol, Sequence

from gedis.conn import Connection
from gedis.parser import Payload, parse_stream
from gedis.reply import ErrReply, MultiBulkReply, Reply, UnknownErrReply

logger = logging.getLogger(__name__)


class _Database(Protocol):
    def exec(self, client: Connection, args: Sequence[bytes]) -> Optional[Reply]: ...

    def close(self) -> Any: ...

    def after_client_close(self, client: Connection) -> Any: ...


def _peer_name(sock: socket.socket) -> str:
    try:
        return str(sock.getpeername())
    except OSError:
        return "unknown"


class RespHandler:
    """Parses requests from each client and runs them against the database."""

    def __init__(self, database: _Database) -> None:
        self.database = database
        self._closing = threading.Event()
        self._lock = threading.Lock()
        self._clients: dict[Connection, socket.socket] = {}

    def _close_client(self, client: Connection) -> None:
        with self._lock:
            sock = self._clients.pop(client, None)
        if sock is None:
            return
        client.close()
        self.database.after_client_close(client)

    def _respond(self, client: Connection, payload: Payload) -> bool:
        if payload.error is not None:
            data = ErrReply(str(payload.error)).to_bytes()
        elif payload.data is None:
            return True
        elif not isinstance(payload.data, MultiBulkReply):
            data = payload.data.to_bytes()
        else:
            result = self.database.exec(client, payload.data.args)
            data = (result if result is not None else UnknownErrReply()).to_bytes()
        try:
            client.write(data)
        except OSError:
            return False
        return True

    def handle(self, stop_event: threading.Event, sock: socket.socket) -> None:
        """Serve one client until it disconnects or the handler is closed."""
        if self._closing.is_set():
            sock.close()
            return
        client = Connection(sock)
        with self._lock:
            self._clients[client] = sock
        peer = _peer_name(sock)
        try:
            with sock.makefile("rb") as stream:
                for payload in parse_stream(stream):
                    if not self._respond(client, payload) or stop_event.is_set():
                        break
        except (OSError, ValueError) as exc:
            logger.debug("connection error: %s", exc)
        finally:
            self._close_client(client)
            logger.info("connection closed: %s", peer)

    def close(self) -> None:
        """Refuse new clients, disconnect the current ones and close the database."""
        logger.info("handler shutting down")
        self._closing.set()
        with self._lock:
            clients = list(self._clients.items())
        for client, sock in clients:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            client.close()
        self.database.close()