import socket

import pytest

from gedis.conn import Connection
from gedis.reply import NoReply, OkReply, PongReply


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    yield left, right
    left.close()
    right.close()


def test_write_delivers_bytes(pair):
    left, right = pair
    conn = Connection(left)
    payload = OkReply().to_bytes()
    conn.write(payload)
    received = right.recv(64)
    assert received == payload
    assert received == b"+OK\r\n"


def test_empty_write_sends_nothing(pair):
    left, right = pair
    conn = Connection(left)
    empty = NoReply().to_bytes()
    pong = PongReply().to_bytes()
    conn.write(empty)
    conn.write(pong)
    received = right.recv(64)
    assert received == pong
    assert received == b"+PONG\r\n"


def test_select_db_changes_index():
    conn = Connection()
    assert conn.db_index == 0
    conn.select_db(3)
    assert conn.db_index == 3


def test_close_closes_socket(pair):
    left, _ = pair
    conn = Connection(left)
    conn.close()
    assert left.fileno() == -1


def test_close_with_wait_closes_socket(pair):
    left, _ = pair
    conn = Connection(left, wait=0.01)
    conn.close()
    assert left.fileno() == -1


def test_write_after_close_raises(pair):
    left, _ = pair
    conn = Connection(left)
    conn.close()
    with pytest.raises(OSError):
        conn.write(b"data")


def test_remote_address_matches_socket(pair):
    left, _ = pair
    conn = Connection(left)
    assert conn.remote_address == left.getpeername()


def test_detached_connection_has_no_address():
    conn = Connection()
    conn.write(b"data")
    conn.close()
    assert conn.remote_address is None