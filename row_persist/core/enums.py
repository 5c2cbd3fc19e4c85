"""Enumerations shared across the mapping and statement layers."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Database backends with a built-in dialect preset."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class PlaceholderStyle(Enum):
    """Positional placeholder rendering."""

    QMARK = "qmark"  # ?
    FORMAT = "format"  # %s
    NUMERIC = "numeric"  # $1, $2, ...
    NUMERIC_COLON = "numeric_colon"  # :1, :2, ...


class NameMapping(Enum):
    """Policy for deriving a column name from an untagged attribute name."""

    AS_IS = "as_is"
    LOWER = "lower"
    SNAKE_CASE = "snake_case"


class PrimaryKeyKind(Enum):
    """Value kind of an aggregate's primary key."""

    NONE = "none"
    INT = "int"
    STRING = "string"
