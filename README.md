# gedis

gedis is a small key-value server that speaks the Redis serialization
protocol (RESP), so Redis clients such as `redis-cli` can talk to it for
the commands listed below. It keeps several numbered databases in memory.
It can also record every write to an append-only file and replay that file
at start-up.

## Installation

```
pip install .
```

## Configuration

By default the server reads `conf.yaml` from the current directory. You can
give a different file with `-c`/`--config`. Unknown keys are ignored, and
values of the wrong type are reported as errors.

```yaml
tcp:
  addr: "127.0.0.1:6399"   # host:port; an IPv6 host may be written in brackets
database:
  count: 16                # number of databases; 0 or missing means 16
  append_only: true        # record writes to the append-only file
  aof_filename: "appendonly.aof"
```

With `append_only: true` an `aof_filename` is required. The file is created
with mode 0600 if it does not exist.

## Running

```
gedis
gedis --config path/to/conf.yaml
```

If the configuration cannot be read, or the address cannot be bound, the
command prints the error and exits with status 1.

The server stops cleanly on SIGINT, SIGTERM, SIGHUP or SIGQUIT. It then
closes the listener and the client connections, and flushes the
append-only file. It waits up to five seconds for connection threads to
finish.

## Commands

Command names are case-insensitive. Each connection starts on database 0.

| Command | Reply |
| --- | --- |
| `PING` | `PONG` |
| `SELECT index` | `OK`; an error if the index is not a number or is out of range |
| `SET key value` | `OK` |
| `SETNX key value` | `1` if stored, `0` if the key already existed |
| `GET key` | the value, or a null bulk if the key is missing |
| `GETSET key value` | the previous value, or a null bulk |
| `STRLEN key` | the value's length, or a null bulk if the key is missing |
| `DEL key [key ...]` | how many of the keys existed |
| `EXISTS key [key ...]` | how many of the keys exist; repeated keys count each time |
| `KEYS pattern` | keys matching a glob pattern (`*`, `?`, `[...]`; `*` and `?` do not match `/`) |
| `TYPE key` | `string`, or `none` if the key is missing |
| `RENAME key newkey` | `OK`; the error `no such key` if the key is missing |
| `RENAMENX key newkey` | `1` if renamed, `0` if `newkey` exists |
| `FLUSHDB` | `OK` after removing every key of the current database |

An unknown command returns `ERR unknown command: <name>`. A command with
the wrong number of arguments returns
`ERR wrong number of arguments for '<name>' command`.

An empty string is sent back as a null bulk reply, so a key set to `""`
reads back the same as a missing key.

## What it does not do

- Only string values exist; there are no lists, hashes, sets or sorted sets.
- Keys never expire, and there is no `EXPIRE`/`TTL`.
- There is no authentication, no replication and no pub/sub.
- The append-only file only grows; it is never rewritten or compacted.

## Using it as a library

Parsing and encoding RESP:

```python
from gedis.parser import parse_bytes
from gedis.reply import MultiBulkReply

frame = MultiBulkReply([b"set", b"greeting", b"hello"]).to_bytes()
for payload in parse_bytes(frame):
    print(payload.data.args)   # [b'set', b'greeting', b'hello']
```

`gedis.parser.parse_stream` yields `Payload` objects from any binary stream.
Each payload holds either a reply in `data` or a `ProtocolError` in `error`.

Running commands without a network:

```python
from gedis.conn import Connection
from gedis.database import Database

db = Database()
client = Connection()          # a detached connection; writes are discarded
db.exec(client, [b"set", b"k", b"v"]).to_bytes()   # b'+OK\r\n'
db.exec(client, [b"get", b"k"]).to_bytes()         # b'$1\r\nv\r\n'
```

Other parts of the package:

- `gedis.database.Database(count, append_only, aof_filename)` holds the
  databases and handles `SELECT`.
- `gedis.core.Core` is a single keyspace. New commands can be added with
  `gedis.core.register_command(name, executor, arity)`.
- `gedis.aof.AofHandler` writes command lines to the append-only file from
  a background thread. `load_aof()` replays the file.
- `gedis.handler.RespHandler` serves RESP clients. `gedis.tcp.EchoHandler`
  is a plain line-echo handler.
- `gedis.config.load_config(path)` reads a configuration into a `Config`.
- `gedis.cli.build_app(config)` wires a `Database`, a `RespHandler` and a
  listening socket into a `gedis.app.App`. Call `run()` on it to accept
  connections, and `stop()` to shut down.

## Tests

```
pip install ".[test]"
pytest
```