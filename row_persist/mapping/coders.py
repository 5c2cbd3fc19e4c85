"""Value coder registry.

A coder converts between a field's Python value and a value the driver can
transport (str, bytes, numbers, datetimes, None). Coders are stateless and
chosen per field when the field map is built: an explicit tag flag wins,
then a type's own ``to_db``/``from_db`` hooks, then ``identity``.

NULL handling is not a coder concern; FieldDescriptor applies the
zero-is-null policy around every coder.
"""

from __future__ import annotations

import gzip
import json
import pickle
import zlib
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from row_persist.core.exceptions import DecodeError, EncodeError

if TYPE_CHECKING:
    from row_persist.mapping.fields import FieldDescriptor


class Coder(Protocol):
    """Bidirectional transform between a field value and a transport value."""

    name: str

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        """Convert a field value into a transport value."""
        ...

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        """Convert a non-NULL transport value into a field value."""
        ...


@runtime_checkable
class Persistable(Protocol):
    """Types that know how to persist themselves as a scalar.

    ``from_db`` is expected to be a classmethod.
    """

    def to_db(self) -> Any: ...

    def from_db(self, raw: Any) -> Any: ...


def has_custom_coding(tp: Any) -> bool:
    """Return True when *tp* provides both ``to_db`` and ``from_db``."""
    return isinstance(tp, type) and callable(getattr(tp, "to_db", None)) and callable(
        getattr(tp, "from_db", None)
    )


def _to_bytes(raw: Any) -> bytes:
    if isinstance(raw, memoryview):
        return raw.tobytes()
    if isinstance(raw, str):
        return raw.encode("utf-8")
    return bytes(raw)


class IdentityCoder:
    """Pass values through, coercing wire values into the field type."""

    name = "identity"

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        return value

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        base = field.base_type
        if isinstance(base, type) and isinstance(raw, base):
            return raw
        adapter = field.adapter
        if adapter is None:
            return raw
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            raise DecodeError(self.name, f"{raw!r} is not a valid {field.type!r}: {e}") from e


class CustomCoder:
    """Defer to the field type's ``to_db`` / ``from_db`` hooks."""

    name = "custom"

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        if value is None:
            return None
        try:
            return value.to_db()
        except (TypeError, ValueError) as e:
            raise EncodeError(self.name, str(e)) from e

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        try:
            return field.base_type.from_db(raw)
        except (TypeError, ValueError) as e:
            raise DecodeError(self.name, str(e)) from e


class JsonCoder:
    """Store values as canonical JSON text."""

    name = "json"

    def dumps(self, field: FieldDescriptor, value: Any) -> str:
        adapter = field.adapter
        try:
            data = adapter.dump_python(value, mode="json") if adapter is not None else value
            return json.dumps(data, sort_keys=True, separators=(",", ":"))
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(self.name, str(e)) from e

    def loads(self, field: FieldDescriptor, text: str | bytes) -> Any:
        adapter = field.adapter
        try:
            if adapter is not None:
                return adapter.validate_json(text)
            return json.loads(text)
        except (ValidationError, ValueError) as e:
            raise DecodeError(self.name, str(e)) from e

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        return self.dumps(field, value)

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = _to_bytes(raw)
        return self.loads(field, raw)


class JsonGzipCoder(JsonCoder):
    """JSON text compressed with gzip."""

    name = "jsongzip"

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        return gzip.compress(self.dumps(field, value).encode("utf-8"))

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        try:
            text = gzip.decompress(_to_bytes(raw))
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(self.name, str(e)) from e
        return self.loads(field, text)


class PickleCoder:
    """Binary structured serialization with :mod:`pickle`.

    Only decode data written by trusted code: unpickling can execute
    arbitrary code.
    """

    name = "pickle"

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise EncodeError(self.name, str(e)) from e

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        # a corrupt payload can fail with almost any exception type
        try:
            return pickle.loads(_to_bytes(raw))
        except Exception as e:
            raise DecodeError(self.name, str(e)) from e


class PickleGzipCoder(PickleCoder):
    """Pickle payload compressed with gzip."""

    name = "picklegzip"

    def encode(self, field: FieldDescriptor, value: Any) -> Any:
        return gzip.compress(super().encode(field, value))

    def decode(self, field: FieldDescriptor, raw: Any) -> Any:
        try:
            payload = gzip.decompress(_to_bytes(raw))
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(self.name, str(e)) from e
        return super().decode(field, payload)


IDENTITY = IdentityCoder()
CUSTOM = CustomCoder()

_registry: dict[str, Coder] = {}


def register_coder(coder: Coder, *aliases: str) -> None:
    """Register *coder* under its name and any *aliases*.

    Registration must happen before the first field map that uses the flag
    is built.
    """
    for key in (coder.name, *aliases):
        _registry[key.lower()] = coder


def get_coder(name: str) -> Coder | None:
    """Look up a registered coder by flag name."""
    return _registry.get(name.lower())


def coder_names() -> list[str]:
    """Registered flag names, sorted."""
    return sorted(_registry)


register_coder(IDENTITY)
register_coder(JsonCoder())
register_coder(JsonGzipCoder())
register_coder(PickleCoder(), "gob")
register_coder(PickleGzipCoder(), "gobgzip")
