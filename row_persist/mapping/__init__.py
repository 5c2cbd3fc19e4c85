"""Mapping layer - field maps, value coders and row scanning."""

from __future__ import annotations

from row_persist.mapping.coders import (
    Coder,
    Persistable,
    coder_names,
    get_coder,
    register_coder,
)
from row_persist.mapping.fields import (
    FieldDescriptor,
    FieldMap,
    PrimaryKey,
    get_fields,
    primary_key,
    set_primary_key,
)
from row_persist.mapping.scanner import (
    scan_all,
    scan_all_async,
    scan_one,
    scan_one_async,
    scan_row,
    scan_row_async,
)
from row_persist.mapping.tags import Tag, TagInfo, parse_tag

__all__ = [
    "Tag",
    "TagInfo",
    "parse_tag",
    "FieldDescriptor",
    "FieldMap",
    "PrimaryKey",
    "get_fields",
    "primary_key",
    "set_primary_key",
    "Coder",
    "Persistable",
    "register_coder",
    "get_coder",
    "coder_names",
    "scan_one",
    "scan_row",
    "scan_all",
    "scan_one_async",
    "scan_row_async",
    "scan_all_async",
]
