"""The multi-database engine that dispatches commands to keyspaces."""

from __future__ import annotations

import functools
import logging
import os
import re
from typing import Optional, Sequence, Union

from gedis import commands as _commands  # noqa: F401  (registers the commands)
from gedis.aof import AofHandler
from gedis.conn import Connection
from gedis.core import Core
from gedis.dict import SyncDict
from gedis.reply import ArgNumErrReply, ErrReply, OkReply, Reply, UnknownErrReply

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 16
_INT_RE = re.compile(rb"[+-]?[0-9]+")


class Database:
    """A set of numbered keyspaces, optionally persisted to an AOF file."""

    def __init__(
        self,
        count: int = DEFAULT_COUNT,
        append_only: bool = False,
        aof_filename: Optional[Union[str, "os.PathLike[str]"]] = None,
    ) -> None:
        if count == 0:
            count = DEFAULT_COUNT
        if count < 0:
            raise ValueError("database count must not be negative")
        self.aof_handler: Optional[AofHandler] = None
        if append_only:
            if not aof_filename:
                raise ValueError("append-only mode needs an AOF file name")
            self.aof_handler = AofHandler(aof_filename, self)
            self.cores = [
                Core(i, SyncDict(), functools.partial(self.aof_handler.add_aof, i))
                for i in range(count)
            ]
            self.aof_handler.load_aof()
        else:
            self.cores = [Core(i, SyncDict()) for i in range(count)]

    def exec(self, client: Connection, args: Sequence[bytes]) -> Reply:
        """Run a command line for ``client``; failures become an unknown error."""
        try:
            name = args[0].decode("utf-8", errors="replace").lower()
            if name == "select":
                if len(args) != 2:
                    return ArgNumErrReply(name)
                return exec_select(client, self, args)
            return self.cores[client.db_index].exec(client, args)
        except Exception:
            logger.exception("command failed")
            return UnknownErrReply()

    def close(self) -> None:
        """Flush and close the AOF file, if any."""
        if self.aof_handler is not None:
            self.aof_handler.close()

    def after_client_close(self, client: Connection) -> None:
        """Hook called when a client disconnects; nothing is kept per client."""


def exec_select(client: Connection, database: Database, args: Sequence[bytes]) -> Reply:
    """Switch ``client`` to the database named by ``args[1]``."""
    raw = args[1]
    if not _INT_RE.fullmatch(raw):
        return ErrReply("ERR invalid db index")
    index = int(raw)
    if index < 0 or index >= len(database.cores):
        return ErrReply("ERR index is out of range")
    client.select_db(index)
    return OkReply()