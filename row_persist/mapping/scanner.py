"""Row scanner.

Binds result columns to aggregate fields by column name. Columns without a
matching field are ignored and fields without a matching column keep their
current value, so partial projections and wide ``SELECT *`` both work.

Rows may be tuples, ``sqlite3.Row`` objects or dicts (psycopg ``dict_row``).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from row_persist.core.exceptions import CoderError, ExecutorError, NoRowsError, ScanError
from row_persist.mapping.fields import FieldMap, fields_of, get_fields

T = TypeVar("T")


def _columns(cursor: Any) -> list[str]:
    if cursor.description is None:
        return []
    return [desc[0] for desc in cursor.description]


def _pairs(columns: list[str], row: Any) -> Iterable[tuple[str, Any]]:
    if isinstance(row, dict):
        return row.items()
    return zip(columns, row)


def bind_row(fields: FieldMap, columns: list[str], row: Any, dst: Any) -> None:
    """Decode one fetched row into *dst*."""
    for column, raw in _pairs(columns, row):
        descriptor = fields.get(column)
        if descriptor is None:
            continue
        # assignment can fail on frozen or validate_assignment models
        try:
            setattr(dst, descriptor.name, descriptor.decode(raw))
        except (CoderError, ValueError, TypeError, AttributeError) as e:
            raise ScanError(column, str(e)) from e


def _fetchone(cursor: Any) -> Any:
    try:
        return cursor.fetchone()
    except Exception as e:
        raise ExecutorError("scan", "DB error fetching row", e) from e


async def _fetchone_async(cursor: Any) -> Any:
    try:
        return await cursor.fetchone()
    except Exception as e:
        raise ExecutorError("scan", "DB error fetching row", e) from e


def scan_one(cursor: Any, dst: Any) -> None:
    """Scan the next row of *cursor* into *dst*, leaving the cursor open.

    Raises:
        NoRowsError: If the cursor has no further row.
        ScanError: If a column cannot be decoded into its field.
    """
    fields = fields_of(dst)
    row = _fetchone(cursor)
    if row is None:
        raise NoRowsError()
    bind_row(fields, _columns(cursor), row, dst)


def scan_row(cursor: Any, dst: Any) -> None:
    """Scan a single row into *dst* and close the cursor."""
    try:
        scan_one(cursor, dst)
    finally:
        cursor.close()


def scan_all(cursor: Any, model: type[T], dst: list[T] | None = None) -> list[T]:
    """Scan every remaining row into fresh *model* instances.

    Instances are appended to *dst* (a new list when omitted), which is
    returned. An exhausted cursor yields an empty list. The cursor is closed
    on every exit path.
    """
    results: list[T] = [] if dst is None else dst
    try:
        fields = get_fields(model)
        columns = _columns(cursor)
        while (row := _fetchone(cursor)) is not None:
            instance = fields.new()
            bind_row(fields, columns, row, instance)
            results.append(instance)
    finally:
        cursor.close()
    return results


async def scan_one_async(cursor: Any, dst: Any) -> None:
    """Async variant of :func:`scan_one`."""
    fields = fields_of(dst)
    row = await _fetchone_async(cursor)
    if row is None:
        raise NoRowsError()
    bind_row(fields, _columns(cursor), row, dst)


async def scan_row_async(cursor: Any, dst: Any) -> None:
    """Async variant of :func:`scan_row`."""
    try:
        await scan_one_async(cursor, dst)
    finally:
        await cursor.close()


async def scan_all_async(cursor: Any, model: type[T], dst: list[T] | None = None) -> list[T]:
    """Async variant of :func:`scan_all`."""
    results: list[T] = [] if dst is None else dst
    try:
        fields = get_fields(model)
        columns = _columns(cursor)
        while (row := await _fetchone_async(cursor)) is not None:
            instance = fields.new()
            bind_row(fields, columns, row, instance)
            results.append(instance)
    finally:
        await cursor.close()
    return results
