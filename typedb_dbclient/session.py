"""Sessions on a database, from which transactions are opened."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from .database import Database, ServerDatabase
from .transaction import Transaction
from .types import Options, SessionIsClosedError, SessionType, TransactionType, TypeDBError

logger = logging.getLogger(__name__)


class Session:
    """A session of a given type on one database."""

    def __init__(self, database: Database, session_type: SessionType, session_info: Any) -> None:
        self._database = database
        self._session_type = session_type
        self._session_info = session_info
        self._lock = threading.Lock()
        self._is_open = True

    @classmethod
    async def open(cls, database: Database, session_type: SessionType) -> "Session":
        """Open a session of ``session_type`` on ``database``."""

        async def task(server_database: ServerDatabase, _conn: Any, _first: bool) -> Any:
            return await server_database.connection.open_session(
                server_database.name, session_type, Options()
            )

        session_info = await database.run_failsafe(task)
        return cls(database, session_type, session_info)

    @property
    def database_name(self) -> str:
        return self._database.name

    @property
    def type_(self) -> SessionType:
        return self._session_type

    def is_open(self) -> bool:
        return self._is_open

    def force_close(self) -> None:
        """Close the session on the server; later calls do nothing."""
        with self._lock:
            if not self._is_open:
                return
            self._is_open = False
            session_info = self._session_info
        connection = self._database.connection.connection(session_info.address)
        connection.close_session(session_info.session_id)

    async def transaction(
        self, transaction_type: TransactionType, options: Optional[Options] = None
    ) -> Transaction:
        """Open a transaction, reopening the session on another replica if needed."""
        if not self.is_open():
            raise SessionIsClosedError()
        if options is None:
            options = Options()
        session_type = self._session_type

        async def task(server_database: ServerDatabase, _conn: Any, is_first_run: bool) -> Any:
            connection = server_database.connection
            if is_first_run:
                session_info = self._session_info
            else:
                session_info = await connection.open_session(
                    server_database.name, session_type, options
                )
            stream = await connection.open_transaction(
                session_info.session_id, transaction_type, options, session_info.network_latency
            )
            return session_info, stream

        session_info, stream = await self._database.run_failsafe(task)
        self._session_info = session_info
        return Transaction(stream)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.force_close()

    def __del__(self) -> None:
        if getattr(self, "_is_open", False):
            try:
                self.force_close()
            except TypeDBError as err:
                logger.warning("Error encountered while closing session: %s", err)

    def __repr__(self) -> str:
        return (
            f"Session(database={self._database!r}, session_type={self._session_type!r}, "
            f"is_open={self._is_open!r})"
        )