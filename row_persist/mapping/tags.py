"""Field tag parsing.

A tag is ``"<column>[,flag[,flag...]]"``. An empty column token keeps the
default column name; ``"-"`` excludes the field. ``pk``/``primarykey`` and
``zeroisnull`` are policy flags; any other token names a value coder.
"""

from __future__ import annotations

from dataclasses import dataclass

EXCLUDE = "-"

PRIMARY_KEY_FLAGS = frozenset({"pk", "primarykey"})
ZERO_IS_NULL_FLAG = "zeroisnull"


class Tag:
    """Annotation marker carrying a raw tag string.

    Example:
        id: Annotated[int, Tag("id,pk")] = 0
    """

    def __init__(self, spec: str = "") -> None:
        self.spec = spec

    def __repr__(self) -> str:
        return f"Tag({self.spec!r})"


@dataclass(frozen=True)
class TagInfo:
    """Parsed tag."""

    column: str
    primary_key: bool = False
    zero_is_null: bool = False
    coders: tuple[str, ...] = ()


def parse_tag(raw: str, field_name: str) -> TagInfo | None:
    """Parse a raw tag string for *field_name*.

    Returns None when the field is excluded.
    """
    tokens = [token.strip() for token in raw.split(",")]
    head = tokens[0]
    if head == EXCLUDE:
        return None

    primary_key = False
    zero_is_null = False
    coders: list[str] = []
    for flag in tokens[1:]:
        if not flag:
            continue
        lowered = flag.lower()
        if lowered in PRIMARY_KEY_FLAGS:
            primary_key = True
        elif lowered == ZERO_IS_NULL_FLAG:
            zero_is_null = True
        else:
            coders.append(lowered)

    return TagInfo(
        column=head or field_name,
        primary_key=primary_key,
        zero_is_null=zero_is_null,
        coders=tuple(coders),
    )
