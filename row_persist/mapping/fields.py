"""Field map construction.

Walks a dataclass or pydantic model once, applies tag parsing and the
process-wide naming policy, and caches the resulting FieldMap per class.
The cache is a plain dict: lookups take no lock, and two threads building
the same unseen class both produce an equal map (last write wins).
"""

from __future__ import annotations

import dataclasses
import logging
import re
import types
from collections.abc import Callable, Iterator, Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from functools import cached_property
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, TypeAdapter
from pydantic.errors import PydanticSchemaGenerationError, PydanticUndefinedAnnotation

from row_persist.core.enums import NameMapping, PrimaryKeyKind
from row_persist.core.exceptions import (
    ConflictingTagsError,
    DuplicateColumnError,
    MultiplePrimaryKeysError,
    NotAStructError,
    PrimaryKeyTypeError,
    UnrecognizedFlagError,
    UnresolvedAnnotationError,
)
from row_persist.core.settings import get_settings
from row_persist.mapping.coders import CUSTOM, IDENTITY, Coder, get_coder, has_custom_coding
from row_persist.mapping.tags import Tag, parse_tag

logger = logging.getLogger(__name__)

_ZERO_FACTORIES: dict[type, Callable[[], Any]] = {
    bool: bool,
    int: int,
    float: float,
    str: str,
    bytes: bytes,
    Decimal: Decimal,
    datetime: lambda: datetime.min,
    date: lambda: date.min,
    time: time,
    timedelta: timedelta,
}


def _none() -> None:
    return None


def _strip_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(tp) is Annotated:
        args = get_args(tp)
        return args[0], tuple(args[1:])
    return tp, ()


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return (inner type, admits None)."""
    if tp is Any or tp is None or tp is type(None):
        return tp, True
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        inner = [arg for arg in args if arg is not type(None)]
        nullable = len(inner) != len(args)
        if len(inner) == 1:
            return inner[0], nullable
        return tp, nullable
    return tp, False


def zero_factory(tp: Any) -> Callable[[], Any]:
    """Return a callable producing a fresh zero value for *tp*."""
    inner, nullable = _unwrap_optional(tp)
    if nullable:
        return _none
    origin = get_origin(inner) or inner
    if origin in _ZERO_FACTORIES:
        return _ZERO_FACTORIES[origin]
    if not isinstance(origin, type) or issubclass(origin, Enum):
        return _none
    try:
        origin()
    except (TypeError, ValueError):
        return _none
    return origin


def _map_name(name: str, policy: NameMapping) -> str:
    if policy is NameMapping.LOWER:
        return name.lower()
    if policy is NameMapping.SNAKE_CASE:
        return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
    return name


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """One persisted field of an aggregate."""

    name: str
    column: str
    ordinal: int
    type: Any = Any
    primary_key: bool = False
    zero_is_null: bool = False
    coder: Coder = dataclasses.field(default=IDENTITY, repr=False)

    @cached_property
    def base_type(self) -> Any:
        """The field type without Optional, reduced to its origin class."""
        inner, _ = _unwrap_optional(self.type)
        return get_origin(inner) or inner

    @cached_property
    def adapter(self) -> TypeAdapter[Any] | None:
        """Pydantic adapter for the field type, or None if unsupported."""
        try:
            return TypeAdapter(self.type)
        except (PydanticSchemaGenerationError, PydanticUndefinedAnnotation):
            return None

    @cached_property
    def _zero(self) -> Callable[[], Any]:
        return zero_factory(self.type)

    def zero(self) -> Any:
        """A fresh zero value for this field."""
        return self._zero()

    def is_zero(self, value: Any) -> bool:
        if value is None:
            return True
        zero = self.zero()
        if zero is None:
            return False
        return bool(value == zero)

    def encode(self, value: Any) -> Any:
        """Encode a field value for transport, applying zero-is-null."""
        if self.zero_is_null and self.is_zero(value):
            return None
        return self.coder.encode(self, value)

    def decode(self, raw: Any) -> Any:
        """Decode a transport value; NULL yields the zero value."""
        if raw is None:
            return self.zero()
        return self.coder.decode(self, raw)


@dataclasses.dataclass(frozen=True)
class PrimaryKey:
    """Snapshot of an instance's primary key."""

    column: str | None
    kind: PrimaryKeyKind
    value: Any = None

    @property
    def empty(self) -> bool:
        if self.kind is PrimaryKeyKind.NONE or self.value is None:
            return True
        if self.kind is PrimaryKeyKind.INT:
            return self.value == 0
        return self.value == ""


@dataclasses.dataclass(frozen=True)
class FieldMap(Mapping[str, FieldDescriptor]):
    """Column name to FieldDescriptor mapping for one aggregate class.

    Iteration follows declaration order, which is also the column order of
    generated SQL.
    """

    model: type
    fields: Mapping[str, FieldDescriptor]
    primary_key: FieldDescriptor | None = None
    key_kind: PrimaryKeyKind = PrimaryKeyKind.NONE
    required: tuple[tuple[str, Callable[[], Any]], ...] = dataclasses.field(
        default=(), compare=False, repr=False
    )

    def __getitem__(self, column: str) -> FieldDescriptor:
        return self.fields[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def descriptors(self, include_pk: bool = True) -> list[FieldDescriptor]:
        return [f for f in self.fields.values() if include_pk or not f.primary_key]

    def new(self) -> Any:
        """Allocate an instance with zero values for required arguments."""
        kwargs = {name: factory() for name, factory in self.required}
        if issubclass(self.model, BaseModel):
            return self.model.model_construct(**kwargs)
        return self.model(**kwargs)


def _declared_fields(model: type) -> list[tuple[str, Any, list[str], bool]]:
    """Return (name, annotation, raw tags, required) in declaration order."""
    tag_key = get_settings().tag_key
    declared: list[tuple[str, Any, list[str], bool]] = []

    if isinstance(model, type) and issubclass(model, BaseModel):
        for name, info in model.model_fields.items():
            tags = [m.spec for m in info.metadata if isinstance(m, Tag)]
            declared.append((name, info.annotation, tags, info.is_required()))
        return declared

    if isinstance(model, type) and dataclasses.is_dataclass(model):
        try:
            hints = get_type_hints(model, include_extras=True)
        except (NameError, TypeError) as e:
            raise UnresolvedAnnotationError(model.__qualname__, str(e)) from e
        for f in dataclasses.fields(model):
            annotation, extras = _strip_annotated(hints[f.name])
            tags = [m.spec for m in extras if isinstance(m, Tag)]
            if tag_key in f.metadata:
                tags.append(f.metadata[tag_key])
            required = (
                f.init
                and f.default is dataclasses.MISSING
                and f.default_factory is dataclasses.MISSING
            )
            declared.append((f.name, annotation, tags, required))
        return declared

    raise NotAStructError(model)


def _select_coder(model: type, name: str, annotation: Any, flags: tuple[str, ...]) -> Coder:
    if len(flags) > 1:
        raise UnrecognizedFlagError(model.__qualname__, name, ",".join(flags))
    if flags:
        coder = get_coder(flags[0])
        if coder is None:
            raise UnrecognizedFlagError(model.__qualname__, name, flags[0])
        return coder
    inner, _ = _unwrap_optional(annotation)
    if has_custom_coding(inner):
        return CUSTOM
    return IDENTITY


def _key_kind(model: type, descriptor: FieldDescriptor) -> PrimaryKeyKind:
    base = descriptor.base_type
    if isinstance(base, type) and issubclass(base, int) and not issubclass(base, bool):
        return PrimaryKeyKind.INT
    if isinstance(base, type) and issubclass(base, str):
        return PrimaryKeyKind.STRING
    raise PrimaryKeyTypeError(model.__qualname__, descriptor.name, descriptor.type)


def build_fields(model: type) -> FieldMap:
    """Build a FieldMap for *model* without consulting the cache."""
    policy = get_settings().name_mapping
    columns: dict[str, FieldDescriptor] = {}
    keys: list[FieldDescriptor] = []
    required: list[tuple[str, Callable[[], Any]]] = []

    for ordinal, (name, annotation, tags, is_required) in enumerate(_declared_fields(model)):
        if is_required:
            required.append((name, zero_factory(annotation)))
        if name.startswith("_") and not tags:
            continue

        if len(tags) > 1:
            raise ConflictingTagsError(model.__qualname__, name, tags)
        info = parse_tag(tags[0] if tags else "", _map_name(name, policy))
        if info is None:
            continue

        descriptor = FieldDescriptor(
            name=name,
            column=info.column,
            ordinal=ordinal,
            type=annotation,
            primary_key=info.primary_key,
            zero_is_null=info.zero_is_null,
            coder=_select_coder(model, name, annotation, info.coders),
        )
        if descriptor.column in columns:
            raise DuplicateColumnError(model.__qualname__, descriptor.column)
        columns[descriptor.column] = descriptor
        if descriptor.primary_key:
            keys.append(descriptor)

    if len(keys) > 1:
        raise MultiplePrimaryKeysError(model.__qualname__, [k.column for k in keys])
    key = keys[0] if keys else None

    return FieldMap(
        model=model,
        fields=types.MappingProxyType(columns),
        primary_key=key,
        key_kind=_key_kind(model, key) if key is not None else PrimaryKeyKind.NONE,
        required=tuple(required),
    )


_field_cache: dict[type, FieldMap] = {}


def get_fields(model: type) -> FieldMap:
    """Return the cached FieldMap for *model*, building it on first use."""
    fields = _field_cache.get(model)
    if fields is None:
        fields = build_fields(model)
        _field_cache[model] = fields
        logger.debug("Built field map for %s: %s", model.__qualname__, list(fields))
    return fields


def fields_of(obj: Any) -> FieldMap:
    """FieldMap for an instance or a class."""
    return get_fields(obj if isinstance(obj, type) else type(obj))


def primary_key(obj: Any) -> PrimaryKey:
    """Snapshot the primary key column, kind and value of *obj*."""
    fields = fields_of(obj)
    key = fields.primary_key
    if key is None:
        return PrimaryKey(column=None, kind=PrimaryKeyKind.NONE)
    return PrimaryKey(column=key.column, kind=fields.key_kind, value=getattr(obj, key.name))


def set_primary_key(obj: Any, value: Any) -> None:
    """Assign *value* to the primary key field of *obj*, if it has one."""
    key = fields_of(obj).primary_key
    if key is not None:
        setattr(obj, key.name, value)
