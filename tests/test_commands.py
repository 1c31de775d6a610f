import pytest

import gedis.commands  # noqa: F401
from gedis.core import Core, DataEntity
from gedis.dict import SyncDict
from gedis.reply import (
    ArgNumErrReply,
    BulkReply,
    ErrReply,
    IntReply,
    MultiBulkReply,
    NullBulkReply,
    OkReply,
    PongReply,
    StatusReply,
    UnknownErrReply,
    WrongTypeErrReply,
)


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def db(recorded):
    return Core(0, SyncDict(), recorded.append)


def run(db, *parts):
    return db.exec(None, list(parts))


def test_ping(db):
    assert run(db, b"PING") == PongReply()


def test_set_then_get(db, recorded):
    assert run(db, b"set", b"k", b"v") == OkReply()
    assert run(db, b"get", b"k") == BulkReply(b"v")
    assert recorded == [[b"set", b"k", b"v"]]


def test_get_missing(db):
    assert run(db, b"get", b"nope") == NullBulkReply()


def test_get_wrong_arity(db):
    assert run(db, b"get") == ArgNumErrReply("get")


def test_get_non_string_value(db):
    db.put_entity("k", DataEntity(["list"]))
    assert run(db, b"get", b"k") == WrongTypeErrReply()


def test_setnx_keeps_first_value(db, recorded):
    assert run(db, b"setnx", b"k", b"first") == IntReply(1)
    assert run(db, b"setnx", b"k", b"second") == IntReply(0)
    assert run(db, b"get", b"k") == BulkReply(b"first")
    assert [line[0] for line in recorded] == [b"setnx", b"setnx"]


def test_getset_returns_previous(db):
    assert run(db, b"getset", b"k", b"one") == NullBulkReply()
    assert run(db, b"getset", b"k", b"two") == BulkReply(b"one")
    assert run(db, b"get", b"k") == BulkReply(b"two")


def test_strlen(db):
    run(db, b"set", b"k", b"hello")
    assert run(db, b"strlen", b"k") == IntReply(len(b"hello"))
    assert run(db, b"strlen", b"missing") == NullBulkReply()


def test_del_counts_existing_and_records(db, recorded):
    run(db, b"set", b"a", b"1")
    run(db, b"set", b"b", b"2")
    assert run(db, b"del", b"a", b"b", b"c") == IntReply(2)
    assert recorded[-1] == [b"del", b"a", b"b", b"c"]
    assert run(db, b"get", b"a") == NullBulkReply()


def test_del_nothing_is_not_recorded(db, recorded):
    assert run(db, b"del", b"missing") == IntReply(0)
    assert recorded == []


def test_exists_counts_repeats(db):
    run(db, b"set", b"a", b"1")
    assert run(db, b"exists", b"a", b"a", b"b") == IntReply(2)


def test_keys_matches_pattern(db):
    for key in (b"a1", b"a2", b"b1"):
        run(db, b"set", key, b"v")
    result = run(db, b"keys", b"a*")
    assert sorted(result.args) == [b"a1", b"a2"]


def test_keys_character_class(db):
    for key in (b"a1", b"b1", b"c1"):
        run(db, b"set", key, b"v")
    assert sorted(run(db, b"keys", b"[ab]1").args) == [b"a1", b"b1"]
    assert sorted(run(db, b"keys", b"[^ab]1").args) == [b"c1"]


def test_keys_star_does_not_cross_slash(db):
    run(db, b"set", b"plain", b"v")
    run(db, b"set", b"dir/name", b"v")
    assert run(db, b"keys", b"*").args == [b"plain"]


def test_keys_bad_pattern_matches_nothing(db):
    run(db, b"set", b"a", b"v")
    result = run(db, b"keys", b"[")
    assert result.to_bytes() == b"*0\r\n"


def test_flushdb(db, recorded):
    run(db, b"set", b"a", b"1")
    assert run(db, b"flushdb") == OkReply()
    assert run(db, b"get", b"a") == NullBulkReply()
    assert recorded[-1] == [b"flushdb"]


def test_type(db):
    assert run(db, b"type", b"k") == StatusReply("none")
    run(db, b"set", b"k", b"v")
    assert run(db, b"type", b"k") == StatusReply("string")
    db.put_entity("other", DataEntity({"a": 1}))
    assert run(db, b"type", b"other") == UnknownErrReply()


def test_rename(db, recorded):
    run(db, b"set", b"old", b"v")
    assert run(db, b"rename", b"old", b"new") == OkReply()
    assert run(db, b"get", b"new") == BulkReply(b"v")
    assert run(db, b"get", b"old") == NullBulkReply()
    assert recorded[-1] == [b"rename", b"old", b"new"]


def test_rename_missing(db):
    assert run(db, b"rename", b"old", b"new") == ErrReply("no such key")


def test_rename_to_same_key_keeps_value(db):
    run(db, b"set", b"k", b"v")
    assert run(db, b"rename", b"k", b"k") == OkReply()
    assert run(db, b"get", b"k") == BulkReply(b"v")


def test_renamenx(db):
    run(db, b"set", b"a", b"1")
    run(db, b"set", b"b", b"2")
    assert run(db, b"renamenx", b"a", b"b") == IntReply(0)
    assert run(db, b"get", b"b") == BulkReply(b"2")
    assert run(db, b"renamenx", b"a", b"c") == IntReply(1)
    assert run(db, b"get", b"c") == BulkReply(b"1")
    assert run(db, b"renamenx", b"missing", b"d") == ErrReply("no such key")