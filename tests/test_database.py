import pytest

from gedis.conn import Connection
from gedis.database import Database, exec_select
from gedis.reply import (
    ArgNumErrReply,
    BulkReply,
    ErrReply,
    NullBulkReply,
    OkReply,
    UnknownErrReply,
)


@pytest.fixture
def database():
    return Database()


def test_default_count(database):
    assert len(database.cores) == 16


def test_zero_count_means_default():
    assert len(Database(count=0).cores) == 16


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        Database(count=-1)


def test_set_get_in_selected_db(database):
    client = Connection()
    assert database.exec(client, [b"set", b"k", b"v"]) == OkReply()
    assert database.exec(client, [b"get", b"k"]) == BulkReply(b"v")


def test_select_isolates_databases(database):
    client = Connection()
    database.exec(client, [b"set", b"k", b"v"])
    assert database.exec(client, [b"SELECT", b"1"]) == OkReply()
    assert client.db_index == 1
    assert database.exec(client, [b"get", b"k"]) == NullBulkReply()


def test_select_out_of_range(database):
    client = Connection()
    assert database.exec(client, [b"select", b"16"]) == ErrReply("ERR index is out of range")
    assert database.exec(client, [b"select", b"-1"]) == ErrReply("ERR index is out of range")
    assert client.db_index == 0


def test_select_invalid_index(database):
    client = Connection()
    assert database.exec(client, [b"select", b"one"]) == ErrReply("ERR invalid db index")


def test_select_wrong_arity(database):
    assert database.exec(Connection(), [b"select"]) == ArgNumErrReply("select")


def test_exec_select_directly(database):
    client = Connection()
    assert exec_select(client, database, [b"select", b"2"]) == OkReply()
    assert client.db_index == 2


def test_empty_command_line_is_unknown_error(database):
    assert database.exec(Connection(), []) == UnknownErrReply()


def test_unknown_command(database):
    assert database.exec(Connection(), [b"nosuch"]) == ErrReply("ERR unknown command: nosuch")


def test_append_only_requires_filename():
    with pytest.raises(ValueError):
        Database(append_only=True)


def test_append_only_persists_across_restart(tmp_path):
    path = tmp_path / "appendonly.aof"
    first = Database(append_only=True, aof_filename=path)
    writer = Connection()
    first.exec(writer, [b"select", b"1"])
    first.exec(writer, [b"set", b"k", b"v"])
    first.close()
    saved = path.read_bytes()

    second = Database(append_only=True, aof_filename=path)
    reader = Connection()
    assert second.exec(reader, [b"get", b"k"]) == NullBulkReply()
    second.exec(reader, [b"select", b"1"])
    assert second.exec(reader, [b"get", b"k"]) == BulkReply(b"v")
    second.close()
    assert path.read_bytes() == saved


def test_flushdb_persists(tmp_path):
    path = tmp_path / "appendonly.aof"
    first = Database(append_only=True, aof_filename=path)
    client = Connection()
    first.exec(client, [b"set", b"k", b"v"])
    first.exec(client, [b"flushdb"])
    first.close()

    second = Database(append_only=True, aof_filename=path)
    assert second.exec(Connection(), [b"get", b"k"]) == NullBulkReply()
    second.close()


def test_after_client_close_keeps_data(database):
    client = Connection()
    database.exec(client, [b"set", b"k", b"v"])
    database.after_client_close(client)
    assert database.exec(Connection(), [b"get", b"k"]) == BulkReply(b"v")