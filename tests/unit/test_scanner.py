"""Unit tests for the row scanner."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Annotated, Any

import pytest
from models import WHEN, ItemJson, Person
from pydantic import BaseModel, ConfigDict, Field

from row_persist.core.exceptions import ExecutorError, NoRowsError, ScanError
from row_persist.mapping.scanner import scan_all, scan_one, scan_row
from row_persist.mapping.tags import Tag


@dataclass(frozen=True)
class FrozenRow:
    id: Annotated[int, Tag("id,pk")] = 0
    name: str = ""


class CheckedRow(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    count: Annotated[int, Field(gt=0)] = 1


class FakeCursor:
    """Cursor double serving fixed rows."""

    def __init__(self, columns: list[str], rows: list[Any], fail_at: int | None = None) -> None:
        self.description = [(c, None, None, None, None, None, None) for c in columns]
        self._rows = list(rows)
        self._fail_at = fail_at
        self._fetched = 0
        self.closed = False

    def fetchone(self) -> Any:
        if self._fail_at is not None and self._fetched == self._fail_at:
            raise sqlite3.OperationalError("connection lost")
        self._fetched += 1
        return self._rows.pop(0) if self._rows else None

    def close(self) -> None:
        self.closed = True


class TestScanOne:
    def test_scan_two_rows(self, seeded: sqlite3.Connection) -> None:
        cursor = seeded.execute("select * from person order by id")

        alice = Person()
        scan_one(cursor, alice)

        bob = Person(Age=50, _private=14, Ephemeral=16)
        scan_one(cursor, bob)

        assert alice == Person(1, "Alice", 0, "alice@alice.com", 0, 32, WHEN, WHEN, 65)
        assert bob.Age == 0
        assert bob.closed.year == 1
        assert bob.height is None
        assert bob._private == 14
        assert bob.Ephemeral == 16

    def test_no_rows(self, conn: sqlite3.Connection) -> None:
        cursor = conn.execute("select * from person")
        with pytest.raises(NoRowsError):
            scan_one(cursor, Person())

    def test_no_rows_is_lookup_error(self, conn: sqlite3.Connection) -> None:
        cursor = conn.execute("select * from person")
        with pytest.raises(LookupError):
            scan_row(cursor, Person())

    def test_partial_projection_keeps_other_fields(self, seeded: sqlite3.Connection) -> None:
        cursor = seeded.execute("select name, 'extra' as unknown from person where id = 2")
        person = Person(id=99, Email="keep@example.com")
        scan_row(cursor, person)
        assert person.name == "Bob"
        assert person.id == 99
        assert person.Email == "keep@example.com"

    def test_dict_rows(self) -> None:
        cursor = FakeCursor(["id", "stuff"], [{"id": 5, "stuff": '{"a":true}', "other": 1}])
        item = ItemJson()
        scan_row(cursor, item)
        assert item.id == 5
        assert item.stuff == {"a": True}
        assert cursor.closed

    def test_decode_failure_names_column(self) -> None:
        cursor = FakeCursor(["id", "stuff"], [(1, "{broken")])
        with pytest.raises(ScanError) as excinfo:
            scan_row(cursor, ItemJson())
        assert excinfo.value.column == "stuff"
        assert cursor.closed

    def test_frozen_destination_names_column(self) -> None:
        cursor = FakeCursor(["name"], [("Ann",)])
        with pytest.raises(ScanError) as excinfo:
            scan_one(cursor, FrozenRow())
        assert excinfo.value.column == "name"

    def test_rejected_assignment_names_column(self) -> None:
        cursor = FakeCursor(["name", "count"], [("Ann", 0)])
        row = CheckedRow()
        with pytest.raises(ScanError) as excinfo:
            scan_one(cursor, row)
        assert excinfo.value.column == "count"
        assert row.name == "Ann"

    def test_fetch_failure_wrapped(self) -> None:
        cursor = FakeCursor(["id"], [(1,)], fail_at=0)
        with pytest.raises(ExecutorError) as excinfo:
            scan_row(cursor, ItemJson())
        assert isinstance(excinfo.value.driver_error, sqlite3.OperationalError)
        assert cursor.closed


class TestScanAll:
    def test_scan_all(self, seeded: sqlite3.Connection) -> None:
        cursor = seeded.execute("select * from person order by id")
        people = scan_all(cursor, Person)
        assert len(people) == 2
        assert people[0] == Person(1, "Alice", 0, "alice@alice.com", 0, 32, WHEN, WHEN, 65)
        assert people[1].name == "Bob"
        assert people[1].Age == 0

    def test_zero_rows_is_empty_list(self, conn: sqlite3.Connection) -> None:
        cursor = conn.execute("select * from person")
        assert scan_all(cursor, Person) == []

    def test_appends_to_destination(self) -> None:
        existing = [ItemJson(id=1)]
        cursor = FakeCursor(["id"], [(2,), (3,)])
        result = scan_all(cursor, ItemJson, existing)
        assert result is existing
        assert [item.id for item in existing] == [1, 2, 3]

    def test_cursor_closed_on_error_mid_iteration(self) -> None:
        cursor = FakeCursor(["id", "stuff"], [(1, "{}"), (2, "not json")])
        with pytest.raises(ScanError):
            scan_all(cursor, ItemJson)
        assert cursor.closed

    def test_cursor_closed_on_transport_error(self) -> None:
        cursor = FakeCursor(["id"], [(1,), (2,)], fail_at=1)
        with pytest.raises(ExecutorError):
            scan_all(cursor, ItemJson)
        assert cursor.closed

    def test_cursor_closed_on_success(self) -> None:
        cursor = FakeCursor(["id"], [])
        scan_all(cursor, ItemJson)
        assert cursor.closed
