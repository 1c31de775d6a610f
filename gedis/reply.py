"""RESP reply values and their wire encodings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

CRLF = b"\r\n"

PONG_BYTES = b"+PONG\r\n"
OK_BYTES = b"+OK\r\n"
NULL_BULK_BYTES = b"$-1\r\n"
EMPTY_MULTI_BULK_BYTES = b"*0\r\n"
NO_BYTES = b""

UNKNOWN_ERR_BYTES = b"-ERR unknown\r\n"
SYNTAX_ERR_BYTES = b"-ERR syntax error\r\n"
WRONG_TYPE_ERR_BYTES = (
    b"-WRONGTYPE Operation against a key holding the wrong kind of value\r\n"
)


class Reply(ABC):
    """A value that can be written to a client in RESP form."""

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Return the RESP encoding of this reply."""


@dataclass(frozen=True)
class BulkReply(Reply):
    """A single binary-safe string; an empty one is sent as a null bulk."""

    args: bytes

    def to_bytes(self) -> bytes:
        if not self.args:
            return NULL_BULK_BYTES
        return b"$" + str(len(self.args)).encode() + CRLF + self.args + CRLF


@dataclass(frozen=True)
class MultiBulkReply(Reply):
    """An array of bulk strings; ``None`` entries are sent as null bulks."""

    args: list[Optional[bytes]] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        if not self.args:
            return EMPTY_MULTI_BULK_BYTES
        parts = [b"*", str(len(self.args)).encode(), CRLF]
        for bulk in self.args:
            if bulk is None:
                parts += [NULL_BULK_BYTES, CRLF]
            else:
                parts += [b"$", str(len(bulk)).encode(), CRLF, bulk, CRLF]
        return b"".join(parts)


@dataclass(frozen=True)
class StatusReply(Reply):
    """A simple status line such as ``+OK``."""

    status: str

    def to_bytes(self) -> bytes:
        return b"+" + self.status.encode() + CRLF


@dataclass(frozen=True)
class ErrReply(Reply):
    """An error line."""

    err: str

    def to_bytes(self) -> bytes:
        return b"-" + self.err.encode() + CRLF


@dataclass(frozen=True)
class IntReply(Reply):
    """An integer reply."""

    code: int

    def to_bytes(self) -> bytes:
        return b":" + str(self.code).encode() + CRLF


@dataclass(frozen=True)
class PongReply(Reply):
    """Answer to ``PING``."""

    def to_bytes(self) -> bytes:
        return PONG_BYTES


@dataclass(frozen=True)
class OkReply(Reply):
    """The ``+OK`` status."""

    def to_bytes(self) -> bytes:
        return OK_BYTES


@dataclass(frozen=True)
class NullBulkReply(Reply):
    """The null bulk string ``$-1``."""

    def to_bytes(self) -> bytes:
        return NULL_BULK_BYTES


@dataclass(frozen=True)
class EmptyMultiBulkReply(Reply):
    """An empty array ``*0``."""

    def to_bytes(self) -> bytes:
        return EMPTY_MULTI_BULK_BYTES


@dataclass(frozen=True)
class NoReply(Reply):
    """Nothing at all is written."""

    def to_bytes(self) -> bytes:
        return NO_BYTES


@dataclass(frozen=True)
class UnknownErrReply(Reply):
    """Generic unknown error."""

    def to_bytes(self) -> bytes:
        return UNKNOWN_ERR_BYTES


@dataclass(frozen=True)
class ArgNumErrReply(Reply):
    """Wrong number of arguments for a command."""

    cmd: str

    def to_bytes(self) -> bytes:
        return (
            b"-ERR wrong number of arguments for '"
            + self.cmd.encode()
            + b"' command\r\n"
        )


@dataclass(frozen=True)
class SyntaxErrReply(Reply):
    """Syntax error."""

    def to_bytes(self) -> bytes:
        return SYNTAX_ERR_BYTES


@dataclass(frozen=True)
class WrongTypeErrReply(Reply):
    """Operation on a key holding a value of another type."""

    def to_bytes(self) -> bytes:
        return WRONG_TYPE_ERR_BYTES


@dataclass(frozen=True)
class ProtocolErrReply(Reply):
    """Protocol error, reported to clients as a syntax error."""

    def to_bytes(self) -> bytes:
        return SYNTAX_ERR_BYTES