"""Session and transaction kinds, query options and the client's errors."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Optional


class SessionType(enum.Enum):
    """Kind of session opened against a database."""

    DATA = 0
    SCHEMA = 1


class TransactionType(enum.Enum):
    """Kind of transaction opened within a session."""

    READ = 0
    WRITE = 1


@dataclass(frozen=True)
class Options:
    """Options sent with sessions, transactions and queries; None means server default."""

    infer: Optional[bool] = None
    trace_inference: Optional[bool] = None
    explain: Optional[bool] = None
    parallel: Optional[bool] = None
    prefetch: Optional[bool] = None
    prefetch_size: Optional[int] = None
    session_idle_timeout_millis: Optional[int] = None
    transaction_timeout_millis: Optional[int] = None
    schema_lock_acquire_timeout_millis: Optional[int] = None
    read_any_replica: Optional[bool] = None

    def with_infer(self, value: bool) -> "Options":
        """Return a copy of these options with inference switched on or off."""
        return dataclasses.replace(self, infer=value)


class TypeDBError(Exception):
    """Base class of every error raised by the client."""


class TypeDBConnectionError(TypeDBError):
    """An error in talking to the server or cluster."""

    default_message = "A connection error occurred."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class UnableToConnectError(TypeDBConnectionError):
    default_message = "Unable to connect to TypeDB server."


class ClusterReplicaNotPrimaryError(TypeDBConnectionError):
    default_message = "The replica is not the primary replica."


class SessionIsClosedError(TypeDBConnectionError):
    default_message = "The session has been closed and no further operation is allowed."


class ConnectionIsClosedError(TypeDBConnectionError):
    default_message = "The connection has been closed and no further operation is allowed."


class ClusterAllNodesFailedError(TypeDBConnectionError):
    """Every cluster member was tried and each one failed."""

    def __init__(self, errors: str) -> None:
        self.errors = errors
        super().__init__(
            "Attempted connecting to all cluster members, but the following errors occurred: \n"
            + errors
        )