"""Databases spread over replicas, with failover between cluster members."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

from .types import ClusterReplicaNotPrimaryError, UnableToConnectError

logger = logging.getLogger(__name__)

R = TypeVar("R")
Task = Callable[["ServerDatabase", Any, bool], Awaitable[R]]


@dataclass(frozen=True)
class ReplicaInfo:
    """What a server reports about one replica of a database."""

    address: str
    is_primary: bool
    is_preferred: bool
    term: int


@dataclass(frozen=True)
class DatabaseInfo:
    """A database name with the replicas that hold it."""

    name: str
    replicas: tuple[ReplicaInfo, ...] = ()


@dataclass
class ServerDatabase:
    """A database as seen through one server connection."""

    name: str
    connection: Any = field(repr=False)

    async def delete(self) -> None:
        await self.connection.delete_database(self.name)

    async def schema(self) -> str:
        return await self.connection.database_schema(self.name)

    async def type_schema(self) -> str:
        return await self.connection.database_type_schema(self.name)

    async def rule_schema(self) -> str:
        return await self.connection.database_rule_schema(self.name)

    def __str__(self) -> str:
        return self.name


@dataclass
class Replica:
    """One copy of a database on a given server."""

    address: str
    database_name: str
    is_primary: bool
    term: int
    is_preferred: bool
    database: ServerDatabase = field(repr=False)

    @classmethod
    def from_info(cls, database_info: DatabaseInfo, connection: Any) -> list["Replica"]:
        """Build the replicas described by ``database_info``."""
        return [
            cls(
                address=info.address,
                database_name=database_info.name,
                is_primary=info.is_primary,
                term=info.term,
                is_preferred=info.is_preferred,
                database=ServerDatabase(database_info.name, connection.connection(info.address)),
            )
            for info in database_info.replicas
        ]

    @classmethod
    async def fetch_all(cls, name: str, connection: Any) -> list["Replica"]:
        """Ask each server in turn for the replicas of ``name``."""
        for server_connection in connection.connections():
            try:
                info = await server_connection.get_database_replicas(name)
            except UnableToConnectError:
                logger.error(
                    "Failed to fetch replica info for database '%s' from %s. Attempting next server.",
                    name,
                    server_connection.address,
                )
                continue
            return cls.from_info(info, connection)
        raise connection.unable_to_connect_error()


class Database:
    """A named database, reached through whichever replica answers."""

    PRIMARY_REPLICA_TASK_MAX_RETRIES = 10
    FETCH_REPLICAS_MAX_RETRIES = 10
    WAIT_FOR_PRIMARY_REPLICA_SELECTION = 2.0

    def __init__(self, name: str, replicas: Iterable[Replica], connection: Any) -> None:
        self._name = name
        self._replicas = list(replicas)
        self._connection = connection

    @classmethod
    def from_info(cls, database_info: DatabaseInfo, connection: Any) -> "Database":
        return cls(database_info.name, Replica.from_info(database_info, connection), connection)

    @classmethod
    async def get(cls, name: str, connection: Any) -> "Database":
        return cls(name, await Replica.fetch_all(name, connection), connection)

    @property
    def name(self) -> str:
        return self._name

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def replicas(self) -> list[Replica]:
        return list(self._replicas)

    async def delete(self) -> None:
        await self._run_on_primary_replica(lambda database, _conn, _first: database.delete())

    async def schema(self) -> str:
        return await self.run_failsafe(lambda database, _conn, _first: database.schema())

    async def type_schema(self) -> str:
        return await self.run_failsafe(lambda database, _conn, _first: database.type_schema())

    async def rule_schema(self) -> str:
        return await self.run_failsafe(lambda database, _conn, _first: database.rule_schema())

    async def run_failsafe(self, task: Task) -> Any:
        """Run ``task`` on any replica, falling back to the primary if required."""
        try:
            return await self._run_on_any_replica(task)
        except ClusterReplicaNotPrimaryError:
            logger.debug("Attempted to run on a non-primary replica, retrying on primary...")
            return await self._run_on_primary_replica(task)

    def primary_replica(self) -> Optional[Replica]:
        """The primary replica with the highest term, if one is known."""
        primaries = [replica for replica in self._replicas if replica.is_primary]
        if not primaries:
            return None
        return max(reversed(primaries), key=lambda replica: replica.term)

    async def _run_on_any_replica(self, task: Task) -> Any:
        for index, replica in enumerate(list(self._replicas)):
            server_connection = self._connection.connection(replica.address)
            try:
                return await task(replica.database, server_connection, index == 0)
            except UnableToConnectError:
                logger.debug("Unable to connect to %s. Attempting next server.", replica.address)
        raise self._connection.unable_to_connect_error()

    async def _run_on_primary_replica(self, task: Task) -> Any:
        primary = self.primary_replica() or await self._seek_primary_replica()
        for retry in range(self.PRIMARY_REPLICA_TASK_MAX_RETRIES):
            server_connection = self._connection.connection(primary.address)
            try:
                return await task(primary.database, server_connection, retry == 0)
            except (ClusterReplicaNotPrimaryError, UnableToConnectError):
                logger.debug("Primary replica error, waiting...")
                await self._wait_for_primary_replica_selection()
                primary = await self._seek_primary_replica()
        raise self._connection.unable_to_connect_error()

    async def _seek_primary_replica(self) -> Replica:
        for _ in range(self.FETCH_REPLICAS_MAX_RETRIES):
            self._replicas = await Replica.fetch_all(self._name, self._connection)
            primary = self.primary_replica()
            if primary is not None:
                return primary
            await self._wait_for_primary_replica_selection()
        raise self._connection.unable_to_connect_error()

    async def _wait_for_primary_replica_selection(self) -> None:
        await asyncio.sleep(self.WAIT_FOR_PRIMARY_REPLICA_SELECTION)

    def __repr__(self) -> str:
        return f"Database(name={self._name!r}, replicas={self._replicas!r})"