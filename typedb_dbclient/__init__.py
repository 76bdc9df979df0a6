"""Async database, session, transaction and query management over a caller-supplied TypeDB connection."""

__version__ = "0.1.0"

__all__ = ["database", "database_manager", "query", "session", "transaction", "types"]