"""CRUD operations.

Database and AsyncDatabase compose the statement formatter and the row
scanner around a caller-supplied executor. Every operation runs a single
statement; insert reads a generated integer key back from the same cursor.
Nothing here commits: wrap calls in a Transaction or commit the connection.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from row_persist.core.dialect import Dialect
from row_persist.core.enums import PrimaryKeyKind
from row_persist.core.exceptions import ExecutorError, PrimaryKeyNotEmptyError, RowPersistError
from row_persist.core.settings import get_settings
from row_persist.core.statement import insert_statement, select_by_key, update_statement
from row_persist.mapping.fields import PrimaryKey, primary_key, set_primary_key
from row_persist.mapping.scanner import (
    scan_all,
    scan_all_async,
    scan_row,
    scan_row_async,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def new_key() -> str:
    """Default string primary key generator."""
    return str(uuid.uuid4())


def _first_value(row: Any) -> Any:
    if isinstance(row, dict):
        return next(iter(row.values()))
    return row[0]


class _DatabaseBase:
    def __init__(
        self,
        dialect: Dialect | None = None,
        key_generator: Callable[[], str] | None = None,
    ) -> None:
        self._dialect = dialect
        self.key_generator = key_generator or new_key

    @property
    def dialect(self) -> Dialect:
        """The instance dialect, or the process-wide default."""
        return self._dialect if self._dialect is not None else get_settings().dialect

    def _prepare_insert(self, table: str, src: Any) -> tuple[str, list[Any], PrimaryKey]:
        key = primary_key(src)
        if not key.empty:
            raise PrimaryKeyNotEmptyError(type(src).__qualname__, key.value)

        include_pk = key.kind is PrimaryKeyKind.STRING
        if include_pk:
            set_primary_key(src, self.key_generator())

        sql, params = insert_statement(self.dialect, table, src, include_pk)
        if key.kind is PrimaryKeyKind.INT and self.dialect.use_returning:
            sql += f" RETURNING {self.dialect.quoted(key.column)}"
        return sql, params, key


class Database(_DatabaseBase):
    """Synchronous CRUD over a DB-API connection or Transaction.

    Args:
        dialect: SQL rendering rules. Defaults to ``Settings.dialect``.
        key_generator: Produces new string primary keys. Defaults to UUID4 text.
    """

    def _execute(self, db: Any, operation: str, detail: str, sql: str, params: Any) -> Any:
        logger.debug("row_persist.%s: %s %r", operation, sql, params)
        cursor = None
        try:
            cursor = db.cursor()
            cursor.execute(sql, params)
        except RowPersistError:
            raise
        except Exception as e:
            if cursor is not None:
                cursor.close()
            raise ExecutorError(operation, detail, e) from e
        return cursor

    def load(self, db: Any, table: str, dst: Any, pk: Any) -> None:
        """Load the row whose primary key equals *pk* into *dst*.

        Raises:
            MissingPrimaryKeyError: If the type has no primary key field.
            NoRowsError: If no row matches.
        """
        sql = select_by_key(self.dialect, table, dst)
        cursor = self._execute(db, "load", "DB error in Query", sql, [pk])
        scan_row(cursor, dst)

    def insert(self, db: Any, table: str, src: Any) -> None:
        """Insert *src*, filling in its primary key.

        String keys are generated before the INSERT; integer keys are left to
        the database and written back afterwards.
        """
        sql, params, key = self._prepare_insert(table, src)
        cursor = self._execute(db, "insert", "DB error in Exec", sql, params)
        try:
            if key.kind is not PrimaryKeyKind.INT:
                return
            if self.dialect.use_returning:
                try:
                    row = cursor.fetchone()
                except Exception as e:
                    raise ExecutorError("insert", "DB error in QueryRow", e) from e
                if row is None:
                    raise ExecutorError("insert", "RETURNING produced no row")
                new_pk = _first_value(row)
            else:
                new_pk = cursor.lastrowid
                if new_pk is None:
                    raise ExecutorError("insert", "DB error getting new primary key value")
            set_primary_key(src, int(new_pk))
        finally:
            cursor.close()

    def update(self, db: Any, table: str, src: Any) -> int:
        """Update the row matching the primary key of *src*.

        Returns the affected row count; zero matches is not an error.
        """
        sql, params = update_statement(self.dialect, table, src)
        cursor = self._execute(db, "update", "DB error in Exec", sql, params)
        try:
            return int(cursor.rowcount)
        finally:
            cursor.close()

    def save(self, db: Any, table: str, src: Any) -> None:
        """Update *src* if its primary key is set, otherwise insert it."""
        if not primary_key(src).empty:
            self.update(db, table, src)
        else:
            self.insert(db, table, src)

    def query_row(self, db: Any, dst: Any, sql: str, *args: Any) -> None:
        """Run *sql* and scan its first row into *dst*.

        Raises:
            NoRowsError: If the query returns no row.
        """
        cursor = self._execute(db, "query_row", "DB error in Query", sql, args)
        scan_row(cursor, dst)

    def query_all(self, db: Any, model: type[T], sql: str, *args: Any) -> list[T]:
        """Run *sql* and scan every row into new *model* instances."""
        cursor = self._execute(db, "query_all", "DB error in Query", sql, args)
        return scan_all(cursor, model)


class AsyncDatabase(_DatabaseBase):
    """Asynchronous CRUD over aiosqlite, psycopg async, or an AsyncTransaction.

    Cancelling the calling task cancels the pending driver call.
    """

    async def _execute(
        self, db: Any, operation: str, detail: str, sql: str, params: Any
    ) -> Any:
        logger.debug("row_persist.%s: %s %r", operation, sql, params)
        try:
            return await db.execute(sql, params)
        except RowPersistError:
            raise
        except Exception as e:
            raise ExecutorError(operation, detail, e) from e

    async def load(self, db: Any, table: str, dst: Any, pk: Any) -> None:
        """Load the row whose primary key equals *pk* into *dst*."""
        sql = select_by_key(self.dialect, table, dst)
        cursor = await self._execute(db, "load", "DB error in Query", sql, [pk])
        await scan_row_async(cursor, dst)

    async def insert(self, db: Any, table: str, src: Any) -> None:
        """Insert *src*, filling in its primary key."""
        sql, params, key = self._prepare_insert(table, src)
        cursor = await self._execute(db, "insert", "DB error in Exec", sql, params)
        try:
            if key.kind is not PrimaryKeyKind.INT:
                return
            if self.dialect.use_returning:
                try:
                    row = await cursor.fetchone()
                except Exception as e:
                    raise ExecutorError("insert", "DB error in QueryRow", e) from e
                if row is None:
                    raise ExecutorError("insert", "RETURNING produced no row")
                new_pk = _first_value(row)
            else:
                new_pk = cursor.lastrowid
                if new_pk is None:
                    raise ExecutorError("insert", "DB error getting new primary key value")
            set_primary_key(src, int(new_pk))
        finally:
            await cursor.close()

    async def update(self, db: Any, table: str, src: Any) -> int:
        """Update the row matching the primary key of *src*."""
        sql, params = update_statement(self.dialect, table, src)
        cursor = await self._execute(db, "update", "DB error in Exec", sql, params)
        try:
            return int(cursor.rowcount)
        finally:
            await cursor.close()

    async def save(self, db: Any, table: str, src: Any) -> None:
        """Update *src* if its primary key is set, otherwise insert it."""
        if not primary_key(src).empty:
            await self.update(db, table, src)
        else:
            await self.insert(db, table, src)

    async def query_row(self, db: Any, dst: Any, sql: str, *args: Any) -> None:
        """Run *sql* and scan its first row into *dst*."""
        cursor = await self._execute(db, "query_row", "DB error in Query", sql, args)
        await scan_row_async(cursor, dst)

    async def query_all(self, db: Any, model: type[T], sql: str, *args: Any) -> list[T]:
        """Run *sql* and scan every row into new *model* instances."""
        cursor = await self._execute(db, "query_all", "DB error in Query", sql, args)
        return await scan_all_async(cursor, model)


# Module-level API bound to a shared Database. Rebind ``default`` at process
# start to change the dialect or key generator for these functions.
default = Database()


def load(db: Any, table: str, dst: Any, pk: Any) -> None:
    """:meth:`Database.load` using the module ``default`` database."""
    default.load(db, table, dst, pk)


def insert(db: Any, table: str, src: Any) -> None:
    """:meth:`Database.insert` using the module ``default`` database."""
    default.insert(db, table, src)


def update(db: Any, table: str, src: Any) -> int:
    """:meth:`Database.update` using the module ``default`` database."""
    return default.update(db, table, src)


def save(db: Any, table: str, src: Any) -> None:
    """:meth:`Database.save` using the module ``default`` database."""
    default.save(db, table, src)


def query_row(db: Any, dst: Any, sql: str, *args: Any) -> None:
    """:meth:`Database.query_row` using the module ``default`` database."""
    default.query_row(db, dst, sql, *args)


def query_all(db: Any, model: type[T], sql: str, *args: Any) -> list[T]:
    """:meth:`Database.query_all` using the module ``default`` database."""
    return default.query_all(db, model, sql, *args)
