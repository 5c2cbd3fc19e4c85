"""Repository base classes.

Thin wrappers binding an executor, a table and an aggregate class to a
Database, for DDD-oriented usage.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from row_persist.core.database import AsyncDatabase, Database
from row_persist.mapping.fields import get_fields

T = TypeVar("T")


class Repository(Generic[T]):
    """Synchronous repository for one table.

    Subclasses add query methods that delegate to ``find`` / ``find_one``.
    """

    def __init__(
        self,
        db: Any,
        table: str,
        model: type[T],
        database: Database | None = None,
    ) -> None:
        self.db = db
        self.table = table
        self.model = model
        self.database = database or Database()

    def get(self, pk: Any) -> T:
        """Load by primary key; raises NoRowsError when absent."""
        instance = _fresh(self.model)
        self.database.load(self.db, self.table, instance, pk)
        return instance

    def add(self, entity: T) -> T:
        self.database.insert(self.db, self.table, entity)
        return entity

    def update(self, entity: T) -> int:
        return self.database.update(self.db, self.table, entity)

    def save(self, entity: T) -> T:
        self.database.save(self.db, self.table, entity)
        return entity

    def find(self, sql: str, *args: Any) -> list[T]:
        return self.database.query_all(self.db, self.model, sql, *args)

    def find_one(self, sql: str, *args: Any) -> T:
        instance = _fresh(self.model)
        self.database.query_row(self.db, instance, sql, *args)
        return instance


class AsyncRepository(Generic[T]):
    """Async variant of Repository."""

    def __init__(
        self,
        db: Any,
        table: str,
        model: type[T],
        database: AsyncDatabase | None = None,
    ) -> None:
        self.db = db
        self.table = table
        self.model = model
        self.database = database or AsyncDatabase()

    async def get(self, pk: Any) -> T:
        instance = _fresh(self.model)
        await self.database.load(self.db, self.table, instance, pk)
        return instance

    async def add(self, entity: T) -> T:
        await self.database.insert(self.db, self.table, entity)
        return entity

    async def update(self, entity: T) -> int:
        return await self.database.update(self.db, self.table, entity)

    async def save(self, entity: T) -> T:
        await self.database.save(self.db, self.table, entity)
        return entity

    async def find(self, sql: str, *args: Any) -> list[T]:
        return await self.database.query_all(self.db, self.model, sql, *args)

    async def find_one(self, sql: str, *args: Any) -> T:
        instance = _fresh(self.model)
        await self.database.query_row(self.db, instance, sql, *args)
        return instance


def _fresh(model: type[T]) -> T:
    return get_fields(model).new()  # type: ignore[no-any-return]
