"""Key and string commands, registered with the command table on import."""

from __future__ import annotations

import re

from gedis.core import Core, DataEntity, register_command
from gedis.reply import (
    BulkReply,
    ErrReply,
    IntReply,
    MultiBulkReply,
    NullBulkReply,
    OkReply,
    PongReply,
    Reply,
    StatusReply,
    UnknownErrReply,
    WrongTypeErrReply,
)
from gedis.utils import to_command_line

_KEY_ENCODING = "utf-8"
_KEY_ERRORS = "surrogateescape"


def _key(raw: bytes) -> str:
    return raw.decode(_KEY_ENCODING, _KEY_ERRORS)


def _key_bytes(key: str) -> bytes:
    return key.encode(_KEY_ENCODING, _KEY_ERRORS)


def _class_char(pattern: str, pos: int) -> tuple[str, int]:
    if pos >= len(pattern) or pattern[pos] in "-]":
        raise ValueError("bad pattern")
    char = pattern[pos]
    if char == "\\":
        pos += 1
        if pos >= len(pattern):
            raise ValueError("bad pattern")
        char = pattern[pos]
    return char, pos + 1


def _parse_class(pattern: str, pos: int) -> tuple[str, int]:
    negate = pos < len(pattern) and pattern[pos] == "^"
    if negate:
        pos += 1
    items: list[str] = []
    count = 0
    while True:
        if pos < len(pattern) and pattern[pos] == "]" and count:
            pos += 1
            break
        low, pos = _class_char(pattern, pos)
        high = low
        if pos < len(pattern) and pattern[pos] == "-":
            high, pos = _class_char(pattern, pos + 1)
        count += 1
        if low <= high:
            items.append(re.escape(low) + "-" + re.escape(high))
    body = "".join(items)
    if not body:
        return ("." if negate else "(?!)"), pos
    return ("[^" if negate else "[") + body + "]", pos


def _compile_glob(pattern: str) -> "re.Pattern[str]":
    """Compile a shell-style pattern; ``*`` and ``?`` never match ``/``."""
    parts: list[str] = []
    pos = 0
    while pos < len(pattern):
        char = pattern[pos]
        pos += 1
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            part, pos = _parse_class(pattern, pos)
            parts.append(part)
        elif char == "\\":
            if pos >= len(pattern):
                raise ValueError("bad pattern")
            parts.append(re.escape(pattern[pos]))
            pos += 1
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def ping(db: Core, args: list) -> Reply:
    """Answer with PONG."""
    return PongReply()


def exec_del(db: Core, args: list) -> Reply:
    """Delete keys and report how many existed."""
    deleted = db.remove_multi_keys(*(_key(arg) for arg in args))
    if deleted > 0:
        db.add_aof(to_command_line("del", *args))
    return IntReply(deleted)


def exec_exists(db: Core, args: list) -> Reply:
    """Count how many of the given keys exist, repeats counted each time."""
    return IntReply(sum(1 for arg in args if db.get_entity(_key(arg)) is not None))


def exec_keys(db: Core, args: list) -> Reply:
    """List the keys matching a pattern; a malformed pattern matches nothing."""
    try:
        regex = _compile_glob(_key(args[0]))
    except ValueError:
        return MultiBulkReply([])
    matched: list = []

    def collect(key: str, _value: object) -> None:
        if regex.fullmatch(key):
            matched.append(_key_bytes(key))

    db.for_each(collect)
    return MultiBulkReply(matched)


def exec_flushdb(db: Core, args: list) -> Reply:
    """Delete every key of the current database."""
    db.flush()
    db.add_aof(to_command_line("flushdb", *args))
    return OkReply()


def exec_type(db: Core, args: list) -> Reply:
    """Report the type of the value under a key."""
    entity = db.get_entity(_key(args[0]))
    if entity is None:
        return StatusReply("none")
    if isinstance(entity.data, bytes):
        return StatusReply("string")
    return UnknownErrReply()


def _move(db: Core, key: str, new_key: str) -> bool:
    entity = db.get_entity(key)
    if entity is None:
        return False
    if key != new_key:
        db.put_entity(new_key, entity)
        db.remove(key)
    return True


def exec_rename(db: Core, args: list) -> Reply:
    """Move a value to a new key, replacing whatever was there."""
    if not _move(db, _key(args[0]), _key(args[1])):
        return ErrReply("no such key")
    db.add_aof(to_command_line("rename", *args))
    return OkReply()


def exec_renamenx(db: Core, args: list) -> Reply:
    """Move a value to a new key only if that key is free."""
    if db.get_entity(_key(args[1])) is not None:
        return IntReply(0)
    if not _move(db, _key(args[0]), _key(args[1])):
        return ErrReply("no such key")
    db.add_aof(to_command_line("renamenx", *args))
    return IntReply(1)


def _string_value(entity: DataEntity) -> bytes:
    if not isinstance(entity.data, bytes):
        raise TypeError("value is not a string")
    return entity.data


def exec_get(db: Core, args: list) -> Reply:
    """Return the string under a key."""
    entity = db.get_entity(_key(args[0]))
    if entity is None:
        return NullBulkReply()
    try:
        return BulkReply(_string_value(entity))
    except TypeError:
        return WrongTypeErrReply()


def exec_set(db: Core, args: list) -> Reply:
    """Store a string under a key."""
    db.put_entity(_key(args[0]), DataEntity(args[1]))
    db.add_aof(to_command_line("set", *args))
    return OkReply()


def exec_setnx(db: Core, args: list) -> Reply:
    """Store a string only if the key is new; report whether it was stored."""
    db.add_aof(to_command_line("setnx", *args))
    return IntReply(db.put_if_absent(_key(args[0]), DataEntity(args[1])))


def exec_getset(db: Core, args: list) -> Reply:
    """Store a string and return the previous one."""
    key = _key(args[0])
    old = db.get_entity(key)
    db.put_entity(key, DataEntity(args[1]))
    db.add_aof(to_command_line("getset", *args))
    if old is None:
        return NullBulkReply()
    try:
        return BulkReply(_string_value(old))
    except TypeError:
        return WrongTypeErrReply()


def exec_strlen(db: Core, args: list) -> Reply:
    """Return the length of the string under a key."""
    entity = db.get_entity(_key(args[0]))
    if entity is None:
        return NullBulkReply()
    try:
        return IntReply(len(_string_value(entity)))
    except TypeError:
        return WrongTypeErrReply()


register_command("ping", ping, 1)
register_command("del", exec_del, -2)
register_command("exists", exec_exists, -2)
register_command("keys", exec_keys, 2)
register_command("flushdb", exec_flushdb, 1)
register_command("type", exec_type, 2)
register_command("rename", exec_rename, 3)
register_command("renamenx", exec_renamenx, 3)
register_command("get", exec_get, 2)
register_command("set", exec_set, 3)
register_command("setnx", exec_setnx, 3)
register_command("getset", exec_getset, 3)
register_command("strlen", exec_strlen, 2)