"""Statement formatting.

Renders column lists, placeholder lists and bound values for single-table
CRUD. Every helper walks the field map in the same order, so the n-th
placeholder always pairs with the n-th value.
"""

from __future__ import annotations

from typing import Any

from row_persist.core.dialect import Dialect
from row_persist.core.exceptions import EncodeError, MissingPrimaryKeyError
from row_persist.mapping.fields import FieldMap, fields_of


def columns(src: Any, include_pk: bool) -> list[str]:
    """Column names of *src* (an instance or class) in field order."""
    return [f.column for f in fields_of(src).descriptors(include_pk)]


def columns_quoted(dialect: Dialect, src: Any, include_pk: bool) -> str:
    """Quoted, comma-joined column names."""
    return ", ".join(dialect.quoted(column) for column in columns(src, include_pk))


def placeholders(dialect: Dialect, src: Any, include_pk: bool, start: int = 1) -> list[str]:
    """One placeholder per column, numbered from *start*."""
    count = len(fields_of(src).descriptors(include_pk))
    return [dialect.placeholder(start + i) for i in range(count)]


def placeholders_string(dialect: Dialect, src: Any, include_pk: bool) -> str:
    return ", ".join(placeholders(dialect, src, include_pk))


def values(src: Any, include_pk: bool) -> list[Any]:
    """Encoded field values of *src* in column order."""
    result: list[Any] = []
    for descriptor in fields_of(src).descriptors(include_pk):
        try:
            result.append(descriptor.encode(getattr(src, descriptor.name)))
        except EncodeError as e:
            raise EncodeError(e.coder, e.detail, column=descriptor.column) from e
    return result


def _require_key(fields: FieldMap, operation: str) -> str:
    if fields.primary_key is None:
        raise MissingPrimaryKeyError(fields.model.__qualname__, operation)
    return fields.primary_key.column


def select_by_key(dialect: Dialect, table: str, model: Any) -> str:
    """``SELECT <columns> FROM <table> WHERE <key> = <placeholder>``."""
    key = _require_key(fields_of(model), "load")
    return (
        f"SELECT {columns_quoted(dialect, model, True)} FROM {dialect.quoted(table)} "
        f"WHERE {dialect.quoted(key)} = {dialect.placeholder(1)}"
    )


def insert_statement(
    dialect: Dialect, table: str, src: Any, include_pk: bool
) -> tuple[str, list[Any]]:
    """``INSERT INTO <table> (<columns>) VALUES (<placeholders>)`` and its params."""
    sql = (
        f"INSERT INTO {dialect.quoted(table)} ({columns_quoted(dialect, src, include_pk)}) "
        f"VALUES ({placeholders_string(dialect, src, include_pk)})"
    )
    return sql, values(src, include_pk)


def update_statement(dialect: Dialect, table: str, src: Any) -> tuple[str, list[Any]]:
    """``UPDATE <table> SET col=?,... WHERE <key>=?`` and its params."""
    fields = fields_of(src)
    key = _require_key(fields, "update")
    names = columns(src, False)
    marks = placeholders(dialect, src, False)
    pairs = ", ".join(f"{dialect.quoted(n)}={p}" for n, p in zip(names, marks))
    sql = (
        f"UPDATE {dialect.quoted(table)} SET {pairs} "
        f"WHERE {dialect.quoted(key)}={dialect.placeholder(len(marks) + 1)}"
    )
    params = values(src, False)
    params.append(getattr(src, fields.primary_key.name))
    return sql, params
