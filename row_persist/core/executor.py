"""Executor protocols.

row_persist never opens connections. The sync API accepts anything with a
DB-API 2.0 ``cursor()`` (``sqlite3``, psycopg, PyMySQL connections, or a
Transaction); the async API accepts anything whose ``execute`` coroutine
returns an async cursor (aiosqlite, ``psycopg.AsyncConnection``, or an
AsyncTransaction).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """DB-API cursor subset used by row_persist."""

    @property
    def description(self) -> Any: ...

    @property
    def rowcount(self) -> int: ...

    @property
    def lastrowid(self) -> Any: ...

    def execute(self, sql: str, params: Sequence[Any] = ...) -> Any: ...

    def fetchone(self) -> Any: ...

    def close(self) -> None: ...


@runtime_checkable
class SyncExecutor(Protocol):
    """Synchronous statement executor."""

    def cursor(self) -> Any:
        """Return a new DB-API cursor."""
        ...


@runtime_checkable
class AsyncExecutor(Protocol):
    """Asynchronous statement executor."""

    async def execute(self, sql: str, params: Sequence[Any] = ...) -> Any:
        """Execute *sql* and return an async cursor."""
        ...
