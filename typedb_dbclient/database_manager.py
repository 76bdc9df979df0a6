"""Creating, listing and looking up databases on a server or cluster."""

from __future__ import annotations

from typing import Any

from .database import Database, ServerDatabase
from .types import ClusterAllNodesFailedError, TypeDBError


class DatabaseManager:
    """Entry point for database-level operations over a connection."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    @property
    def connection(self) -> Any:
        return self._connection

    async def get(self, name: str) -> Database:
        """Look up the database called ``name`` with its current replicas."""
        return await Database.get(name, self._connection)

    async def contains(self, name: str) -> bool:
        """Whether a database called ``name`` exists."""

        async def task(database: ServerDatabase, server_connection: Any, _first: bool) -> bool:
            return await server_connection.database_exists(database.name)

        return await self._run_failsafe(name, task)

    async def create(self, name: str) -> None:
        """Create a database called ``name``."""

        async def task(database: ServerDatabase, server_connection: Any, _first: bool) -> None:
            await server_connection.create_database(database.name)

        await self._run_failsafe(name, task)

    async def all(self) -> list[Database]:
        """Every database, as reported by the first server that answers."""
        errors = []
        for server_connection in self._connection.connections():
            try:
                infos = await server_connection.all_databases()
            except TypeDBError as err:
                errors.append(f"- {server_connection.address}: {err}")
                continue
            return [Database.from_info(info, self._connection) for info in infos]
        raise ClusterAllNodesFailedError("\n".join(errors))

    async def _run_failsafe(self, name: str, task: Any) -> Any:
        database = await Database.get(name, self._connection)
        return await database.run_failsafe(task)

    def __repr__(self) -> str:
        return f"DatabaseManager(connection={self._connection!r})"