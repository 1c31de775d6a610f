"""Append-only file persistence."""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Any, Protocol, Sequence, Union

from gedis.conn import Connection
from gedis.parser import parse_stream
from gedis.reply import MultiBulkReply
from gedis.utils import to_command_line

logger = logging.getLogger(__name__)

_BUFFER_SIZE = 1 << 16
_STOP = object()


class _Executor(Protocol):
    def exec(self, client: Any, args: Sequence[bytes]) -> Any: ...


@dataclass(frozen=True)
class _Payload:
    cmd_line: list
    db_index: int


class AofHandler:
    """Writes command lines to an append-only file in a background thread."""

    def __init__(self, filename: Union[str, "os.PathLike[str]"], database: _Executor) -> None:
        self.filename = os.fspath(filename)
        self._database = database
        fd = os.open(self.filename, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o600)
        self._file = os.fdopen(fd, "ab")
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=_BUFFER_SIZE)
        self._current_db = 0
        self._loading = False
        self._closed = False
        self._writer = threading.Thread(
            target=self._write_loop, name="aof-writer", daemon=True
        )
        self._writer.start()

    def __enter__(self) -> "AofHandler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_aof(self, db_index: int, cmd_line: list) -> None:
        """Queue a command line executed against database ``db_index``."""
        if self._loading or self._closed:
            return
        self._queue.put(_Payload(list(cmd_line), db_index))

    def _write(self, data: bytes) -> bool:
        try:
            self._file.write(data)
            self._file.flush()
        except OSError as exc:
            logger.error("aof write failed: %s", exc)
            return False
        return True

    def _write_loop(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            assert isinstance(item, _Payload)
            if item.db_index != self._current_db:
                select = to_command_line("select", str(item.db_index).encode())
                if not self._write(MultiBulkReply(select).to_bytes()):
                    continue
                self._current_db = item.db_index
            self._write(MultiBulkReply(item.cmd_line).to_bytes())

    def load_aof(self) -> None:
        """Replay every command stored in the file against the database."""
        client = Connection()
        self._loading = True
        try:
            with open(self.filename, "rb") as stream:
                for payload in parse_stream(stream):
                    if payload.error is not None:
                        logger.warning("%s", payload.error)
                        continue
                    if payload.data is None:
                        logger.warning("empty payload")
                        continue
                    if not isinstance(payload.data, MultiBulkReply):
                        logger.warning("invalid payload")
                        continue
                    self._database.exec(client, payload.data.args)
        except OSError as exc:
            logger.error("aof load failed: %s", exc)
        finally:
            self._loading = False
        self._current_db = client.db_index

    def close(self) -> None:
        """Write out everything queued and close the file."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._writer.join()
        self._file.close()