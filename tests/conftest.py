"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import AsyncIterator, Iterator
from datetime import datetime

import aiosqlite
import pytest
from models import WHEN

from row_persist.core.settings import reset_settings

# Store datetimes as ISO-8601 text; the identity coder parses them back.
sqlite3.register_adapter(datetime, lambda value: value.isoformat())

PERSON_SCHEMA = """create table person (
    id integer primary key,
    name text not null,
    Email text not null,
    Age integer,
    opened datetime not null,
    closed datetime,
    height integer
)"""

ITEM_SCHEMA = "create table item (id integer primary key, stuff text, stuffz blob)"

MEN_SCHEMA = "create table men (id text primary key, name text, age integer)"


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """SQLite in-memory connection with the test schema."""
    connection = sqlite3.connect(":memory:")
    connection.execute(PERSON_SCHEMA)
    connection.execute(ITEM_SCHEMA)
    connection.execute(MEN_SCHEMA)
    connection.commit()
    yield connection
    connection.close()


@pytest.fixture
def seeded(conn: sqlite3.Connection) -> sqlite3.Connection:
    """Connection with Alice and Bob inserted by hand."""
    conn.execute(
        "insert into person values (null,'Alice','alice@alice.com',32,?,?,65)", (WHEN, WHEN)
    )
    conn.execute("insert into person values (null,'Bob','bob@bob.com',null,?,null,null)", (WHEN,))
    conn.commit()
    return conn


@pytest.fixture
def restore_settings() -> Iterator[None]:
    """Reset process-wide settings after a test that changes them."""
    yield
    reset_settings()


@pytest.fixture
async def aconn() -> AsyncIterator[aiosqlite.Connection]:
    """aiosqlite in-memory connection with the item and men tables."""
    async with aiosqlite.connect(":memory:") as connection:
        await connection.execute(ITEM_SCHEMA)
        await connection.execute(MEN_SCHEMA)
        await connection.commit()
        yield connection
