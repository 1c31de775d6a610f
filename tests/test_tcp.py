import socket
import threading

import pytest

from gedis.config import Config, TcpConfig
from gedis.tcp import EchoHandler, must_listen


def _recv_exact(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


@pytest.fixture
def echo():
    server, client = socket.socketpair()
    client.settimeout(5)
    handler = EchoHandler()
    thread = threading.Thread(
        target=handler.handle, args=(threading.Event(), server), daemon=True
    )
    thread.start()
    yield handler, client, thread
    client.close()
    thread.join(5)


def test_lines_are_echoed(echo):
    _, client, _ = echo
    client.sendall(b"hello\nworld\n")
    assert _recv_exact(client, 12) == b"hello\nworld\n"


def test_partial_line_is_dropped_at_end(echo):
    _, client, thread = echo
    client.sendall(b"partial")
    client.shutdown(socket.SHUT_WR)
    thread.join(5)
    assert not thread.is_alive()
    assert client.recv(16) == b""


def test_close_ends_open_connections(echo):
    handler, client, thread = echo
    client.sendall(b"ping\n")
    assert _recv_exact(client, 5) == b"ping\n"
    handler.close()
    thread.join(5)
    assert not thread.is_alive()


def test_closing_handler_rejects_connections():
    handler = EchoHandler()
    handler.close()
    server, client = socket.socketpair()
    with client:
        handler.handle(threading.Event(), server)
        assert server.fileno() == -1


def test_must_listen_binds_address():
    listener = must_listen(Config(tcp=TcpConfig("127.0.0.1:0")))
    with listener:
        host, port = listener.getsockname()[:2]
        assert host == "127.0.0.1"
        assert port > 0


@pytest.mark.parametrize("addr", ["nohost", "127.0.0.1:port", "127.0.0.1:99999"])
def test_must_listen_rejects_bad_address(addr):
    with pytest.raises(ValueError):
        must_listen(Config(tcp=TcpConfig(addr)))