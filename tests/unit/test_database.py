"""Unit tests for Database and AsyncDatabase against executor doubles."""

from __future__ import annotations

import asyncio
import gzip
import sqlite3
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from models import Contact, ItemJson, UuidJson

from row_persist.core import database as database_module
from row_persist.core.database import AsyncDatabase, Database, new_key
from row_persist.core.dialect import MYSQL, POSTGRESQL, SQLITE
from row_persist.core.exceptions import (
    ExecutorError,
    MissingPrimaryKeyError,
    PrimaryKeyNotEmptyError,
    TransactionStateError,
    driver_error,
)
from row_persist.core.transaction import Transaction
from row_persist.core.settings import configure


def make_db(cursor: MagicMock) -> MagicMock:
    db = MagicMock()
    db.cursor.return_value = cursor
    return db


class TestInsert:
    def test_returning_reads_generated_key(self) -> None:
        cursor = MagicMock()
        cursor.fetchone.return_value = (42,)
        item = ItemJson(stuff={"a": True})

        Database(POSTGRESQL).insert(make_db(cursor), "item", item)

        sql, params = cursor.execute.call_args.args
        assert sql == 'INSERT INTO "item" ("stuff", "stuffz") VALUES (%s, %s) RETURNING "id"'
        assert params[0] == '{"a":true}'
        assert gzip.decompress(params[1]) == b"{}"
        assert item.id == 42
        cursor.close.assert_called_once()

    def test_returning_dict_row(self) -> None:
        cursor = MagicMock()
        cursor.fetchone.return_value = {"id": 43}
        item = ItemJson()
        Database(POSTGRESQL).insert(make_db(cursor), "item", item)
        assert item.id == 43

    def test_lastrowid(self) -> None:
        cursor = MagicMock()
        cursor.lastrowid = 7
        item = ItemJson()
        Database(SQLITE).insert(make_db(cursor), "item", item)
        assert item.id == 7
        assert "RETURNING" not in cursor.execute.call_args.args[0]

    def test_missing_lastrowid(self) -> None:
        cursor = MagicMock()
        cursor.lastrowid = None
        with pytest.raises(ExecutorError, match="primary key"):
            Database(SQLITE).insert(make_db(cursor), "item", ItemJson())
        cursor.close.assert_called_once()

    def test_key_must_be_empty(self) -> None:
        db = MagicMock()
        with pytest.raises(PrimaryKeyNotEmptyError):
            Database().insert(db, "item", ItemJson(id=3))
        db.cursor.assert_not_called()

    def test_string_key_generated(self) -> None:
        cursor = MagicMock()
        man = UuidJson(name="Tom", age=18)
        Database(MYSQL, key_generator=lambda: "fixed-key").insert(make_db(cursor), "men", man)
        sql, params = cursor.execute.call_args.args
        assert sql == "INSERT INTO `men` (`id`, `name`, `age`) VALUES (%s, %s, %s)"
        assert params == ["fixed-key", "Tom", 18]
        assert man.id == "fixed-key"
        cursor.fetchone.assert_not_called()

    def test_default_key_generator(self) -> None:
        first, second = new_key(), new_key()
        assert first and second and first != second

    def test_no_key_inserts_all_columns(self) -> None:
        cursor = MagicMock()
        Database(SQLITE).insert(make_db(cursor), "contact", Contact("Ann", "ann@example.com"))
        sql, params = cursor.execute.call_args.args
        assert sql == 'INSERT INTO "contact" ("name", "email") VALUES (?, ?)'
        assert params == ["Ann", "ann@example.com"]


class TestUpdateAndSave:
    def test_update_returns_rowcount(self) -> None:
        cursor = MagicMock()
        cursor.rowcount = 0
        assert Database().update(make_db(cursor), "item", ItemJson(id=5)) == 0
        sql, params = cursor.execute.call_args.args
        assert sql == 'UPDATE "item" SET "stuff"=?, "stuffz"=? WHERE "id"=?'
        assert params[0] == "{}"
        assert params[2] == 5

    def test_update_requires_key(self) -> None:
        with pytest.raises(MissingPrimaryKeyError):
            Database().update(MagicMock(), "contact", Contact("a", "b"))

    @pytest.mark.parametrize(
        ("entity", "expected"),
        [
            (ItemJson(), "insert"),
            (ItemJson(id=4), "update"),
            (UuidJson(), "insert"),
            (UuidJson(id="abc"), "update"),
        ],
    )
    def test_save_routes_on_key(self, entity: object, expected: str) -> None:
        database = Database()
        with (
            patch.object(Database, "insert") as insert,
            patch.object(Database, "update") as update,
        ):
            database.save(MagicMock(), "t", entity)
        called = insert if expected == "insert" else update
        other = update if expected == "insert" else insert
        called.assert_called_once()
        other.assert_not_called()


class TestLoadAndErrors:
    def test_load_requires_key(self) -> None:
        with pytest.raises(MissingPrimaryKeyError):
            Database().load(MagicMock(), "contact", Contact("a", "b"), 1)

    def test_driver_error_wrapped(self) -> None:
        cursor = MagicMock()
        original = sqlite3.IntegrityError("UNIQUE constraint failed")
        cursor.execute.side_effect = original

        with pytest.raises(ExecutorError) as excinfo:
            Database().update(make_db(cursor), "item", ItemJson(id=1))

        err = excinfo.value
        assert err.operation == "update"
        assert str(err).startswith("row_persist.update: DB error in Exec")
        assert err.__cause__ is original
        assert driver_error(err) == (original, True)
        cursor.close.assert_called_once()

    def test_cursor_failure_wrapped(self) -> None:
        db = MagicMock()
        original = sqlite3.ProgrammingError("Cannot operate on a closed database.")
        db.cursor.side_effect = original

        with pytest.raises(ExecutorError) as excinfo:
            Database().load(db, "item", ItemJson(), 1)

        assert excinfo.value.operation == "load"
        assert driver_error(excinfo.value) == (original, True)

    def test_transaction_state_error_not_wrapped(self, conn: sqlite3.Connection) -> None:
        with Transaction(conn) as tx:
            tx.commit()
            with pytest.raises(TransactionStateError):
                Database().insert(tx, "men", UuidJson(name="late"))

    def test_driver_error_passthrough(self) -> None:
        err = ValueError("local")
        assert driver_error(err) == (err, False)

    def test_default_dialect_from_settings(self, restore_settings: None) -> None:
        configure(dialect=MYSQL)
        assert Database().dialect == MYSQL
        assert Database(POSTGRESQL).dialect == POSTGRESQL


class TestModuleFunctions:
    def test_delegate_to_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(database_module, "default", Database(MYSQL))
        cursor = MagicMock()
        cursor.rowcount = 1

        assert database_module.update(make_db(cursor), "men", UuidJson(id="k", name="Tom")) == 1
        sql, params = cursor.execute.call_args.args
        assert sql == "UPDATE `men` SET `name`=%s, `age`=%s WHERE `id`=%s"
        assert params == ["Tom", 0, "k"]

    def test_default_uses_settings_dialect(self) -> None:
        assert database_module.default.dialect == SQLITE


class TestAsyncDatabase:
    async def test_insert_returning(self) -> None:
        cursor = MagicMock()
        cursor.fetchone = AsyncMock(return_value=(11,))
        cursor.close = AsyncMock()
        db = MagicMock()
        db.execute = AsyncMock(return_value=cursor)

        item = ItemJson()
        await AsyncDatabase(POSTGRESQL).insert(db, "item", item)

        assert item.id == 11
        assert db.execute.await_args.args[0].endswith('RETURNING "id"')
        cursor.close.assert_awaited_once()

    async def test_driver_error_wrapped(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=sqlite3.OperationalError("no such table: item"))
        with pytest.raises(ExecutorError) as excinfo:
            await AsyncDatabase().query_all(db, ItemJson, "select * from item")
        assert isinstance(excinfo.value.driver_error, sqlite3.OperationalError)

    async def test_cancellation_propagates(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=asyncio.CancelledError())
        with pytest.raises(asyncio.CancelledError):
            await AsyncDatabase().load(db, "item", ItemJson(), 1)
