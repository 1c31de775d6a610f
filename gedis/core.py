"""A single keyspace and the table of commands that operate on it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from gedis.dict import Consumer, SyncDict
from gedis.reply import ArgNumErrReply, ErrReply, Reply

CmdLine = Sequence[bytes]
ExecFunc = Callable[["Core", list], Reply]


@dataclass
class DataEntity:
    """A value stored under a key."""

    data: Any


@dataclass(frozen=True)
class Command:
    """A registered command: its executor and its arity.

    A non-negative arity is the exact length of the command line, the
    command name included; a negative arity ``-n`` means at least ``n``.
    """

    executor: ExecFunc
    arity: int


_COMMANDS: dict[str, Command] = {}


def register_command(name: str, executor: ExecFunc, arity: int) -> None:
    """Register ``executor`` under the case-insensitive ``name``."""
    _COMMANDS[name.lower()] = Command(executor, arity)


def validate_args_len(arity: int, args: CmdLine) -> bool:
    """Check the length of a command line against a command's arity."""
    if arity >= 0:
        return len(args) == arity
    return len(args) >= -arity


class Core:
    """One numbered database: a keyspace and an optional AOF recorder."""

    def __init__(
        self,
        index: int = 0,
        data: Optional[SyncDict] = None,
        add_aof: Optional[Callable[[list], None]] = None,
    ) -> None:
        self.index = index
        self._data = data if data is not None else SyncDict()
        self._add_aof = add_aof

    def exec(self, client: Any, args: CmdLine) -> Reply:
        """Run a command line against this keyspace."""
        name = args[0].decode("utf-8", errors="replace").lower()
        command = _COMMANDS.get(name)
        if command is None:
            return ErrReply("ERR unknown command: " + name)
        if not validate_args_len(command.arity, args):
            return ArgNumErrReply(name)
        return command.executor(self, list(args[1:]))

    def add_aof(self, line: list) -> None:
        """Record a command line in the append-only file, if one is in use."""
        if self._add_aof is not None:
            self._add_aof(line)

    def get_entity(self, key: str) -> Optional[DataEntity]:
        """Return the entity under ``key``, or ``None``."""
        raw = self._data.get(key)
        if not isinstance(raw, DataEntity):
            return None
        return raw

    def put_entity(self, key: str, entity: DataEntity) -> int:
        """Store an entity; return 1 if the key is new."""
        return self._data.put(key, entity)

    def put_if_exists(self, key: str, entity: DataEntity) -> int:
        """Replace an existing entity; return 1 if stored."""
        return self._data.put_if_exists(key, entity)

    def put_if_absent(self, key: str, entity: DataEntity) -> int:
        """Store an entity only under a new key; return 1 if stored."""
        return self._data.put_if_absent(key, entity)

    def remove(self, key: str) -> int:
        """Delete a key; return 1 if it was present."""
        return self._data.remove(key)

    def remove_multi_keys(self, *args: str) -> int:
        """Delete several keys; return how many were present."""
        return sum(self._data.remove(key) for key in args)

    def flush(self) -> None:
        """Delete every key."""
        self._data.clear()

    def for_each(self, consumer: Consumer) -> None:
        """Call ``consumer(key, value)`` for every entry."""
        self._data.for_each(consumer)