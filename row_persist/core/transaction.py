"""Transaction management.

Context managers that bind a single connection for several statements.
Auto-commits on success, auto-rolls-back on exception. A transaction is
itself an executor, so it can be passed to Database / AsyncDatabase.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from row_persist.core.exceptions import TransactionStateError


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


def _check_active(state: _TxState) -> None:
    if state is not _TxState.ACTIVE:
        raise TransactionStateError(state.value, "execute")


class Transaction:
    """Synchronous transaction over a DB-API connection."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._state = _TxState.IDLE

    @property
    def connection(self) -> Any:
        return self._connection

    def __enter__(self) -> Transaction:
        self._state = _TxState.ACTIVE
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state == _TxState.ACTIVE:
            if exc_type is not None:
                self._connection.rollback()
                self._state = _TxState.ROLLED_BACK
            else:
                self._connection.commit()
                self._state = _TxState.COMMITTED

    def cursor(self) -> Any:
        """Return a cursor on the transaction's connection."""
        _check_active(self._state)
        return self._connection.cursor()

    def commit(self) -> None:
        """Explicitly commit the transaction."""
        if self._state == _TxState.ROLLED_BACK:
            raise TransactionStateError("rolled_back", "commit")
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "commit")
        self._connection.commit()
        self._state = _TxState.COMMITTED

    def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "rollback")
        self._connection.rollback()
        self._state = _TxState.ROLLED_BACK


class AsyncTransaction:
    """Asynchronous transaction over an aiosqlite or psycopg async connection."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._state = _TxState.IDLE

    @property
    def connection(self) -> Any:
        return self._connection

    async def __aenter__(self) -> AsyncTransaction:
        self._state = _TxState.ACTIVE
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state == _TxState.ACTIVE:
            if exc_type is not None:
                await self._connection.rollback()
                self._state = _TxState.ROLLED_BACK
            else:
                await self._connection.commit()
                self._state = _TxState.COMMITTED

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute *sql* on the transaction's connection."""
        _check_active(self._state)
        return await self._connection.execute(sql, params)

    async def commit(self) -> None:
        """Explicitly commit the async transaction."""
        if self._state == _TxState.ROLLED_BACK:
            raise TransactionStateError("rolled_back", "commit")
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "commit")
        await self._connection.commit()
        self._state = _TxState.COMMITTED

    async def rollback(self) -> None:
        """Explicitly rollback the async transaction."""
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "rollback")
        await self._connection.rollback()
        self._state = _TxState.ROLLED_BACK
