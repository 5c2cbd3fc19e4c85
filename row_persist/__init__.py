"""row_persist - reflection-driven CRUD for dataclasses and pydantic models."""

from __future__ import annotations

from row_persist.core.database import (
    AsyncDatabase,
    Database,
    insert,
    load,
    query_all,
    query_row,
    save,
    update,
)
from row_persist.core.dialect import MYSQL, POSTGRESQL, SQLITE, Dialect, dialect_for
from row_persist.core.enums import DatabaseBackend, NameMapping, PlaceholderStyle, PrimaryKeyKind
from row_persist.core.exceptions import (
    CoderError,
    ConfigurationError,
    ConflictingTagsError,
    DecodeError,
    DuplicateColumnError,
    EncodeError,
    ExecutorError,
    MissingPrimaryKeyError,
    MultiplePrimaryKeysError,
    NoRowsError,
    NotAStructError,
    PrimaryKeyNotEmptyError,
    PrimaryKeyTypeError,
    RowPersistError,
    ScanError,
    TransactionError,
    TransactionStateError,
    UnrecognizedFlagError,
    UnresolvedAnnotationError,
    driver_error,
)
from row_persist.core.settings import Settings, configure, get_settings
from row_persist.core.transaction import AsyncTransaction, Transaction
from row_persist.mapping.coders import Persistable, register_coder
from row_persist.mapping.fields import get_fields, primary_key, set_primary_key
from row_persist.mapping.scanner import scan_all, scan_one, scan_row
from row_persist.mapping.tags import Tag
from row_persist.repository.base import AsyncRepository, Repository

__all__ = [
    # CRUD
    "Database",
    "AsyncDatabase",
    "load",
    "insert",
    "update",
    "save",
    "query_row",
    "query_all",
    # Dialect
    "Dialect",
    "dialect_for",
    "SQLITE",
    "POSTGRESQL",
    "MYSQL",
    # Settings
    "Settings",
    "configure",
    "get_settings",
    # Transaction
    "Transaction",
    "AsyncTransaction",
    # Repository
    "Repository",
    "AsyncRepository",
    # Mapping
    "Tag",
    "Persistable",
    "register_coder",
    "get_fields",
    "primary_key",
    "set_primary_key",
    "scan_one",
    "scan_row",
    "scan_all",
    # Enums
    "DatabaseBackend",
    "NameMapping",
    "PlaceholderStyle",
    "PrimaryKeyKind",
    # Exceptions
    "RowPersistError",
    "ConfigurationError",
    "NotAStructError",
    "DuplicateColumnError",
    "MultiplePrimaryKeysError",
    "MissingPrimaryKeyError",
    "UnrecognizedFlagError",
    "PrimaryKeyTypeError",
    "UnresolvedAnnotationError",
    "ConflictingTagsError",
    "PrimaryKeyNotEmptyError",
    "CoderError",
    "EncodeError",
    "DecodeError",
    "ScanError",
    "ExecutorError",
    "NoRowsError",
    "TransactionError",
    "TransactionStateError",
    "driver_error",
]
