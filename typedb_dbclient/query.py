"""Queries sent through an open transaction."""

from __future__ import annotations

from typing import Any, AsyncIterator, Optional

from .types import Options


def _resolve(options: Optional[Options]) -> Options:
    return Options() if options is None else options


class QueryManager:
    """Runs TypeQL queries on the transaction stream it belongs to."""

    def __init__(self, transaction_stream: Any) -> None:
        self._stream = transaction_stream

    async def define(self, query: str, options: Optional[Options] = None) -> None:
        await self._stream.define(query, _resolve(options))

    async def undefine(self, query: str, options: Optional[Options] = None) -> None:
        await self._stream.undefine(query, _resolve(options))

    async def delete(self, query: str, options: Optional[Options] = None) -> None:
        await self._stream.delete(query, _resolve(options))

    def match(self, query: str, options: Optional[Options] = None) -> AsyncIterator[Any]:
        """Stream the concept maps answering a match query."""
        return self._stream.match(query, _resolve(options))

    def insert(self, query: str, options: Optional[Options] = None) -> AsyncIterator[Any]:
        """Stream the concept maps produced by an insert query."""
        return self._stream.insert(query, _resolve(options))

    def update(self, query: str, options: Optional[Options] = None) -> AsyncIterator[Any]:
        """Stream the concept maps produced by an update query."""
        return self._stream.update(query, _resolve(options))

    async def match_aggregate(self, query: str, options: Optional[Options] = None) -> Any:
        """The numeric answer of an aggregate match query."""
        return await self._stream.match_aggregate(query, _resolve(options))

    def __repr__(self) -> str:
        return f"QueryManager(transaction_stream={self._stream!r})"