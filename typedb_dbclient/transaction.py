"""A transaction opened within a session."""

from __future__ import annotations

from typing import Any

from .query import QueryManager
from .types import Options, TransactionType


class Transaction:
    """A live transaction, giving access to queries, commit and rollback."""

    def __init__(self, transaction_stream: Any) -> None:
        self._stream = transaction_stream
        self._type: TransactionType = transaction_stream.type_
        self._options: Options = transaction_stream.options
        self._query = QueryManager(transaction_stream)

    @property
    def type_(self) -> TransactionType:
        return self._type

    @property
    def options(self) -> Options:
        return self._options

    @property
    def query(self) -> QueryManager:
        return self._query

    def is_open(self) -> bool:
        return self._stream.is_open()

    async def commit(self) -> None:
        await self._stream.commit()

    async def rollback(self) -> None:
        await self._stream.rollback()

    def __repr__(self) -> str:
        return f"Transaction(type_={self._type!r}, options={self._options!r})"