# typedb-dbclient

An asyncio layer for managing TypeDB databases, sessions, transactions
and queries. It works against one server or a cluster of replicas.

In a cluster, reads such as `Database.schema()` go to the replicas in
turn until one can be reached. If a replica answers that it is not the
primary, the call is sent again to the primary. Work that must run on
the primary, such as `Database.delete()`, looks up the primary replica
with the highest term. If the primary changes or cannot be reached, it
waits two seconds, fetches the replica list again and retries, up to
ten times.

## Installation

```
pip install typedb-dbclient
```

To run the test suite:

```
pip install "typedb-dbclient[test]"
pytest
```

## Usage

```python
from typedb_dbclient.database_manager import DatabaseManager
from typedb_dbclient.session import Session
from typedb_dbclient.types import Options, SessionType, TransactionType


async def example(connection):
    databases = DatabaseManager(connection)
    if not await databases.contains("test"):
        await databases.create("test")

    # Define a schema.
    with await Session.open(await databases.get("test"), SessionType.SCHEMA) as session:
        transaction = await session.transaction(TransactionType.WRITE)
        await transaction.query.define("define person sub entity;")
        await transaction.commit()

    # Read data, with inference switched on.
    data_session = await Session.open(await databases.get("test"), SessionType.DATA)
    transaction = await data_session.transaction(
        TransactionType.READ, Options().with_infer(True)
    )
    async for answer in transaction.query.match("match $x sub thing;"):
        print(answer)
    count = await transaction.query.match_aggregate("match $x isa person; count;")
    data_session.force_close()
```

### Modules

- `typedb_dbclient.types`: `SessionType` (`DATA`, `SCHEMA`),
  `TransactionType` (`READ`, `WRITE`), the frozen `Options` dataclass
  (every field defaults to `None`, meaning the server default;
  `with_infer(value)` returns a changed copy) and the errors.
- `typedb_dbclient.database`: `Database` (`name`, `replicas`,
  `schema()`, `type_schema()`, `rule_schema()`, `delete()`,
  `run_failsafe(task)`, `primary_replica()`), built with
  `Database.get(name, connection)` or
  `Database.from_info(database_info, connection)`. It also holds
  `Replica`, `ServerDatabase` and the `DatabaseInfo` and `ReplicaInfo`
  dataclasses.
- `typedb_dbclient.database_manager`: `DatabaseManager` with `get`,
  `contains`, `create` and `all`. `all()` asks each server in turn and
  uses the first answer.
- `typedb_dbclient.session`: `Session`, opened with
  `Session.open(database, session_type)`. `transaction(type, options)`
  opens a transaction and reopens the session on another replica if the
  first one fails. `force_close()` closes it, and later calls do
  nothing. It can be used as a context manager, which closes it on exit.
- `typedb_dbclient.transaction`: `Transaction`, with `type_`,
  `options`, `query`, `is_open()`, `commit()` and `rollback()`.
- `typedb_dbclient.query`: `QueryManager`, with `define`, `undefine`,
  `delete`, `match`, `insert`, `update` and `match_aggregate`. Each
  takes an optional `Options`.

### Errors

Every error raised by the package is a subclass of `TypeDBError`.
Connection failures raise subclasses of `TypeDBConnectionError`:

- `UnableToConnectError`
- `ClusterReplicaNotPrimaryError`
- `SessionIsClosedError`, raised by `Session.transaction` once the
  session is closed
- `ConnectionIsClosedError`
- `ClusterAllNodesFailedError`, raised by `DatabaseManager.all` when
  every server fails. Its `errors` attribute lists each server's error.

## What the package does not do

The package has no network transport, no wire protocol and no concept or
answer types. You provide the connection object. It must have:

- `connections()`: the server connections.
- `connection(address)`: the server connection for one address.
- `unable_to_connect_error()`: the error to raise when no server can be
  reached.

Each server connection must have:

- the attribute `address`
- the coroutines `get_database_replicas`, `all_databases`,
  `database_exists`, `create_database`, `delete_database`,
  `database_schema`, `database_type_schema`, `database_rule_schema`,
  `open_session` and `open_transaction`
- a plain `close_session(session_id)`

`get_database_replicas` returns a `DatabaseInfo`, and `all_databases`
returns a list of them.

`open_session` returns an object with `address`, `session_id` and
`network_latency`.

`open_transaction` returns a transaction stream with:

- `type_` and `options`
- `is_open()`
- `commit`, `rollback` and the query methods

The answers of `match`, `insert`, `update` and `match_aggregate` are
whatever that stream yields.