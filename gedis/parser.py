"""Streaming RESP request parser."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional

from gedis.reply import (
    CRLF,
    BulkReply,
    ErrReply,
    IntReply,
    MultiBulkReply,
    Reply,
    StatusReply,
)

_INT_RE = re.compile(rb"[+-]?[0-9]+")


class ProtocolError(Exception):
    """Malformed data was received."""


@dataclass
class Payload:
    """One parsed item: either a reply value or a protocol error."""

    data: Optional[Reply] = None
    error: Optional[ProtocolError] = None


@dataclass
class _ReadState:
    reading_multi_line: bool = False
    msg_type: bytes = b"\n"
    args: list[bytes] = field(default_factory=list)
    expected_args_count: int = 0
    bulk_len: int = 0

    def reset(self) -> None:
        self.reading_multi_line = False
        self.msg_type = b"\n"
        self.args = []
        self.expected_args_count = 0
        self.bulk_len = 0

    @property
    def finished(self) -> bool:
        return 0 < self.expected_args_count == len(self.args)


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _protocol_error(data: bytes) -> ProtocolError:
    return ProtocolError("protocol error: " + _text(data))


def _unknown_protocol(data: bytes) -> ProtocolError:
    return ProtocolError("unknown protocol: " + _text(data))


def _parse_int(data: bytes) -> int:
    if not _INT_RE.fullmatch(data):
        raise ValueError(data)
    return int(data)


def _read_exact(stream: BinaryIO, size: int) -> Optional[bytes]:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            return None
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _read_line(stream: BinaryIO, state: _ReadState) -> Optional[bytes]:
    """Read the next line or bulk body; ``None`` means the stream ended."""
    if state.bulk_len == 0:
        msg = stream.readline()
        if not msg.endswith(b"\n"):
            return None
    else:
        msg = _read_exact(stream, state.bulk_len + 2)
        if msg is None:
            return None
    if len(msg) < 2 or not msg.endswith(CRLF):
        raise _protocol_error(msg)
    state.bulk_len = 0
    return msg


def _parse_single_line(msg: bytes) -> Reply:
    if len(msg) < 3:
        raise _protocol_error(msg)
    content = msg[:-2] if msg.endswith(CRLF) else msg
    kind = msg[:1]
    if kind == b"+":
        return StatusReply(_text(content))
    if kind == b"-":
        return ErrReply(_text(content))
    try:
        return IntReply(_parse_int(content))
    except ValueError:
        raise _protocol_error(msg) from None


def _parse_bulk_header(header: bytes, state: _ReadState) -> None:
    if len(header) < 3:
        raise _protocol_error(header)
    try:
        expected_len = _parse_int(header[1:-2])
    except ValueError:
        raise _protocol_error(header) from None
    if expected_len < -1:
        raise _protocol_error(header)
    state.bulk_len = expected_len
    if expected_len == -1:
        return
    state.expected_args_count = 1
    state.msg_type = header[:1]
    state.reading_multi_line = True
    state.args = []


def _parse_multi_bulk_header(header: bytes, state: _ReadState) -> None:
    if len(header) < 3:
        raise _protocol_error(header)
    try:
        expected_lines = _parse_int(header[1:-2])
    except ValueError:
        raise _protocol_error(header) from None
    if expected_lines < 0:
        raise _protocol_error(header)
    if expected_lines > 0:
        state.expected_args_count = expected_lines
        state.msg_type = header[:1]
        state.reading_multi_line = True
        state.args = []


def _parse_multi_line_body(body: bytes, state: _ReadState) -> None:
    if body[:1] == b"$":
        if len(body) < 3:
            raise _protocol_error(body)
        try:
            expected_len = _parse_int(body[1:-2])
        except ValueError:
            raise _protocol_error(body) from None
        if expected_len <= 0:
            state.args.append(b"")
        else:
            state.bulk_len = expected_len
    else:
        if len(body) < 2 or not body.endswith(CRLF):
            raise _protocol_error(body)
        state.args.append(body[:-2])


def parse_stream(stream: BinaryIO) -> Iterator[Payload]:
    """Yield payloads read from a binary stream until it ends.

    The iterator stops when the stream is exhausted, including when it
    ends in the middle of a message. Errors raised by the stream itself
    propagate to the caller.
    """
    state = _ReadState()
    while True:
        try:
            msg = _read_line(stream, state)
        except ProtocolError as exc:
            yield Payload(error=exc)
            state.reset()
            continue
        if msg is None:
            return

        if not state.reading_multi_line:
            kind = msg[:1]
            if kind in (b"*", b"$"):
                header_parser = (
                    _parse_multi_bulk_header if kind == b"*" else _parse_bulk_header
                )
                try:
                    header_parser(msg, state)
                except ProtocolError:
                    yield Payload(error=_unknown_protocol(msg))
                    state.reset()
            elif kind in (b"+", b"-", b":"):
                try:
                    yield Payload(data=_parse_single_line(msg))
                except ProtocolError as exc:
                    yield Payload(error=exc)
                state.reset()
            else:
                yield Payload(error=_unknown_protocol(msg))
            continue

        try:
            _parse_multi_line_body(msg, state)
        except ProtocolError as exc:
            yield Payload(error=exc)
            state.reset()
            continue
        if state.finished:
            if state.msg_type == b"*":
                yield Payload(data=MultiBulkReply(state.args))
            elif state.msg_type == b"$":
                yield Payload(data=BulkReply(state.args[0]))
            state.reset()


def parse_bytes(data: bytes) -> list[Payload]:
    """Parse a complete byte string into a list of payloads."""
    return list(parse_stream(io.BytesIO(data)))