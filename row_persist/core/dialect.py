"""SQL dialect configuration.

A Dialect is plain configuration data: how placeholders are rendered, how
identifiers are quoted, and whether ``INSERT ... RETURNING`` is used to read
back generated integer keys.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from row_persist.core.enums import DatabaseBackend, PlaceholderStyle


class Dialect(BaseModel):
    """Driver-specific SQL rendering rules."""

    model_config = ConfigDict(frozen=True)

    placeholder_style: PlaceholderStyle = PlaceholderStyle.QMARK
    quote: str = '"'
    use_returning: bool = False

    def placeholder(self, index: int) -> str:
        """Render the placeholder for the 1-based parameter *index*."""
        style = self.placeholder_style
        if style is PlaceholderStyle.QMARK:
            return "?"
        if style is PlaceholderStyle.FORMAT:
            return "%s"
        if style is PlaceholderStyle.NUMERIC:
            return f"${index}"
        return f":{index}"

    def quoted(self, name: str) -> str:
        """Quote an identifier, doubling any embedded quote character."""
        if not self.quote:
            return name
        return self.quote + name.replace(self.quote, self.quote * 2) + self.quote


SQLITE = Dialect(placeholder_style=PlaceholderStyle.QMARK, quote='"', use_returning=False)
POSTGRESQL = Dialect(placeholder_style=PlaceholderStyle.FORMAT, quote='"', use_returning=True)
MYSQL = Dialect(placeholder_style=PlaceholderStyle.FORMAT, quote="`", use_returning=False)

_PRESETS: dict[DatabaseBackend, Dialect] = {
    DatabaseBackend.SQLITE: SQLITE,
    DatabaseBackend.POSTGRESQL: POSTGRESQL,
    DatabaseBackend.MYSQL: MYSQL,
}


def dialect_for(backend: DatabaseBackend | str) -> Dialect:
    """Return the preset dialect for a backend (enum member or its name)."""
    if isinstance(backend, str):
        backend = DatabaseBackend(backend.lower())
    return _PRESETS[backend]
