"""row_persist exception hierarchy.

Driver exceptions raised while executing a statement are wrapped in
ExecutorError; the original stays reachable through ``driver_error``.
"""

from __future__ import annotations


class RowPersistError(Exception):
    """Base exception for all row_persist errors."""


# --- Configuration ---


class ConfigurationError(RowPersistError):
    """Base for programmer errors detected while mapping a type."""


class NotAStructError(ConfigurationError, TypeError):
    """Raised when a mapped type is not a dataclass or pydantic model."""

    def __init__(self, target: object) -> None:
        self.target = target
        super().__init__(f"Cannot map {target!r}: expected a dataclass or pydantic model")


class DuplicateColumnError(ConfigurationError):
    """Raised when two fields resolve to the same column name."""

    def __init__(self, model: str, column: str) -> None:
        self.model = model
        self.column = column
        super().__init__(f"Duplicate column '{column}' in {model}")


class MultiplePrimaryKeysError(ConfigurationError):
    """Raised when more than one field is flagged as primary key."""

    def __init__(self, model: str, columns: list[str]) -> None:
        self.model = model
        self.columns = columns
        super().__init__(f"Multiple primary keys in {model}: {columns}")


class MissingPrimaryKeyError(ConfigurationError):
    """Raised when an operation needs a primary key and the type has none."""

    def __init__(self, model: str, operation: str) -> None:
        self.model = model
        self.operation = operation
        super().__init__(f"row_persist.{operation}: no primary key field found in {model}")


class UnrecognizedFlagError(ConfigurationError):
    """Raised for a tag flag that is neither a policy flag nor a coder name."""

    def __init__(self, model: str, field_name: str, flag: str) -> None:
        self.model = model
        self.field_name = field_name
        self.flag = flag
        super().__init__(f"Unrecognized flag '{flag}' on {model}.{field_name}")


class PrimaryKeyTypeError(ConfigurationError):
    """Raised when a primary key field is neither integer nor string valued."""

    def __init__(self, model: str, field_name: str, annotation: object) -> None:
        self.model = model
        self.field_name = field_name
        super().__init__(
            f"Primary key {model}.{field_name} must be int or str, found {annotation!r}"
        )


class UnresolvedAnnotationError(ConfigurationError):
    """Raised when the field annotations of a type cannot be evaluated."""

    def __init__(self, model: str, detail: str) -> None:
        self.model = model
        self.detail = detail
        super().__init__(f"Cannot resolve annotations of {model}: {detail}")


class ConflictingTagsError(ConfigurationError):
    """Raised when a field carries more than one tag."""

    def __init__(self, model: str, field_name: str, tags: list[str]) -> None:
        self.model = model
        self.field_name = field_name
        self.tags = tags
        super().__init__(f"Field {model}.{field_name} has more than one tag: {tags}")


# --- Validation ---


class PrimaryKeyNotEmptyError(RowPersistError, ValueError):
    """Raised by insert when the primary key already holds a value."""

    def __init__(self, model: str, value: object) -> None:
        self.model = model
        self.value = value
        super().__init__(f"row_persist.insert: primary key of {model} must be empty, found {value!r}")


# --- Coders ---


class CoderError(RowPersistError):
    """Base for value encoding and decoding failures."""


class EncodeError(CoderError):
    """Raised when a field value cannot be encoded for transport."""

    def __init__(self, coder: str, detail: str, column: str | None = None) -> None:
        self.coder = coder
        self.detail = detail
        self.column = column
        where = f" for column '{column}'" if column else ""
        super().__init__(f"{coder} encode failed{where}: {detail}")


class DecodeError(CoderError):
    """Raised when a stored value cannot be decoded into the field type."""

    def __init__(self, coder: str, detail: str) -> None:
        self.coder = coder
        super().__init__(f"{coder} decode failed: {detail}")


# --- Scanning and execution ---


class ScanError(RowPersistError):
    """Raised when a result column cannot be bound to its field."""

    def __init__(self, column: str, detail: str) -> None:
        self.column = column
        super().__init__(f"Cannot scan column '{column}': {detail}")


class NoRowsError(RowPersistError, LookupError):
    """Raised when a single-row operation finds no row."""

    def __init__(self, detail: str = "no rows in result set") -> None:
        super().__init__(detail)


class ExecutorError(RowPersistError):
    """Raised when the underlying driver call fails."""

    def __init__(
        self, operation: str, detail: str, driver_error: BaseException | None = None
    ) -> None:
        self.operation = operation
        self.driver_error = driver_error
        suffix = f": {driver_error}" if driver_error is not None else ""
        super().__init__(f"row_persist.{operation}: {detail}{suffix}")


def driver_error(err: BaseException) -> tuple[BaseException, bool]:
    """Return the original driver exception behind *err*.

    The second value is True when *err* wrapped a driver failure, otherwise
    *err* is returned unchanged with False.
    """
    if isinstance(err, ExecutorError) and err.driver_error is not None:
        return err.driver_error, True
    return err, False


# --- Transaction ---


class TransactionError(RowPersistError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")
