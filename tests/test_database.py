import pytest

from typedb_dbclient.database import (
    Database,
    DatabaseInfo,
    Replica,
    ReplicaInfo,
    ServerDatabase,
)
from typedb_dbclient.types import (
    ClusterReplicaNotPrimaryError,
    SessionIsClosedError,
    UnableToConnectError,
)


class FastDatabase(Database):
    WAIT_FOR_PRIMARY_REPLICA_SELECTION = 0.0


class FakeServer:
    def __init__(self, address, *, reachable=True, not_primary=False, info=None):
        self.address = address
        self.reachable = reachable
        self.not_primary = not_primary
        self.info = info
        self.calls = []

    def _check(self, call, name):
        self.calls.append((call, name))
        if not self.reachable:
            raise UnableToConnectError()
        if self.not_primary and call != "replicas":
            raise ClusterReplicaNotPrimaryError()

    async def get_database_replicas(self, name):
        self._check("replicas", name)
        if isinstance(self.info, Exception):
            raise self.info
        return self.info

    async def database_schema(self, name):
        self._check("schema", name)
        return f"schema of {name} at {self.address}"

    async def database_type_schema(self, name):
        self._check("type_schema", name)
        return f"types of {name} at {self.address}"

    async def database_rule_schema(self, name):
        self._check("rule_schema", name)
        return f"rules of {name} at {self.address}"

    async def delete_database(self, name):
        self._check("delete", name)


class FakeConnection:
    def __init__(self, *servers):
        self.servers = {server.address: server for server in servers}

    def connection(self, address):
        return self.servers[address]

    def connections(self):
        return list(self.servers.values())

    def unable_to_connect_error(self):
        return UnableToConnectError("all servers unreachable")


def info(name, *replicas):
    return DatabaseInfo(name, tuple(ReplicaInfo(addr, primary, False, term) for addr, primary, term in replicas))


def make(primary_address="a", info_primary="a"):
    a, b = FakeServer("a"), FakeServer("b")
    shared = info("db", ("a", info_primary == "a", 2), ("b", info_primary == "b", 3))
    a.info = b.info = shared
    connection = FakeConnection(a, b)
    initial = info("db", ("a", primary_address == "a", 1), ("b", primary_address == "b", 1))
    return FastDatabase.from_info(initial, connection), a, b


def test_from_info_builds_replicas():
    database, a, _ = make()
    assert database.name == "db"
    assert [r.address for r in database.replicas] == ["a", "b"]
    assert database.replicas[0].database.connection is a
    assert str(database.replicas[0].database) == "db"


def test_primary_replica_highest_term():
    connection = FakeConnection(FakeServer("a"), FakeServer("b"), FakeServer("c"))
    database = Database.from_info(info("db", ("a", True, 1), ("b", True, 5), ("c", False, 9)), connection)
    assert database.primary_replica().address == "b"


def test_primary_replica_none():
    connection = FakeConnection(FakeServer("a"))
    database = Database.from_info(info("db", ("a", False, 1)), connection)
    assert database.primary_replica() is None


@pytest.mark.asyncio
async def test_schema_uses_first_replica():
    database, a, b = make()
    assert await database.schema() == "schema of db at a"
    assert await database.type_schema() == "types of db at a"
    assert await database.rule_schema() == "rules of db at a"
    assert b.calls == []


@pytest.mark.asyncio
async def test_schema_skips_unreachable_replica():
    database, a, b = make()
    a.reachable = False
    assert await database.schema() == "schema of db at b"


@pytest.mark.asyncio
async def test_first_run_flag_only_on_first_attempt():
    database, a, _ = make()
    a.reachable = False
    flags = []

    async def task(server_database, server_connection, is_first_run):
        flags.append((server_connection.address, is_first_run))
        if server_connection.address == "a":
            raise UnableToConnectError()
        return server_database.name

    assert await database.run_failsafe(task) == "db"
    assert flags == [("a", True), ("b", False)]


@pytest.mark.asyncio
async def test_all_replicas_unreachable():
    database, a, b = make()
    a.reachable = b.reachable = False
    with pytest.raises(UnableToConnectError, match="all servers unreachable"):
        await database.schema()


@pytest.mark.asyncio
async def test_not_primary_falls_back_to_primary():
    database, a, b = make(primary_address="b")
    a.not_primary = True
    assert await database.schema() == "schema of db at b"
    assert ("schema", "db") in a.calls


@pytest.mark.asyncio
async def test_other_errors_propagate():
    database, _, _ = make()

    async def task(server_database, server_connection, is_first_run):
        raise SessionIsClosedError()

    with pytest.raises(SessionIsClosedError):
        await database.run_failsafe(task)


@pytest.mark.asyncio
async def test_delete_runs_on_known_primary():
    database, a, b = make(primary_address="b")
    await database.delete()
    assert b.calls == [("delete", "db")]
    assert a.calls == []


@pytest.mark.asyncio
async def test_delete_seeks_primary_when_unknown():
    database, a, b = make(primary_address=None, info_primary="b")
    await database.delete()
    assert ("delete", "db") in b.calls
    assert database.primary_replica().address == "b"


@pytest.mark.asyncio
async def test_primary_moved_is_refetched():
    database, a, b = make(primary_address="a", info_primary="b")
    a.not_primary = True
    await database.delete()
    assert ("delete", "db") in a.calls
    assert ("delete", "db") in b.calls


@pytest.mark.asyncio
async def test_primary_retries_exhausted():
    database, a, _ = make(primary_address="a", info_primary="a")
    a.not_primary = True
    with pytest.raises(UnableToConnectError):
        await database.delete()
    deletes = [call for call in a.calls if call[0] == "delete"]
    assert len(deletes) == Database.PRIMARY_REPLICA_TASK_MAX_RETRIES


@pytest.mark.asyncio
async def test_seek_gives_up_without_primary():
    database, a, _ = make(primary_address=None, info_primary=None)
    with pytest.raises(UnableToConnectError):
        await database.delete()
    fetches = [call for call in a.calls if call[0] == "replicas"]
    assert len(fetches) == Database.FETCH_REPLICAS_MAX_RETRIES


@pytest.mark.asyncio
async def test_fetch_all_skips_unreachable_server():
    a, b = FakeServer("a", reachable=False), FakeServer("b")
    b.info = info("db", ("a", False, 1), ("b", True, 1))
    replicas = await Replica.fetch_all("db", FakeConnection(a, b))
    assert [(r.address, r.is_primary) for r in replicas] == [("a", False), ("b", True)]


@pytest.mark.asyncio
async def test_fetch_all_propagates_other_errors():
    a = FakeServer("a", info=SessionIsClosedError())
    with pytest.raises(SessionIsClosedError):
        await Replica.fetch_all("db", FakeConnection(a))


@pytest.mark.asyncio
async def test_fetch_all_no_servers_reachable():
    a = FakeServer("a", reachable=False)
    with pytest.raises(UnableToConnectError, match="all servers unreachable"):
        await Replica.fetch_all("db", FakeConnection(a))


@pytest.mark.asyncio
async def test_get_fetches_replicas():
    a = FakeServer("a")
    a.info = info("db", ("a", True, 4))
    database = await Database.get("db", FakeConnection(a))
    assert database.name == "db"
    assert database.primary_replica().term == 4
    assert "db" in repr(database)


@pytest.mark.asyncio
async def test_server_database_delegates():
    server = FakeServer("a")
    server_database = ServerDatabase("db", server)
    assert await server_database.schema() == "schema of db at a"
    await server_database.delete()
    assert server.calls[-1] == ("delete", "db")