"""Process-wide settings.

Settings are read when a type's field map is first built, so ``configure``
must run at process start, before any aggregate is used. Field maps already
cached keep the column names they were built with.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from row_persist.core.dialect import SQLITE, Dialect
from row_persist.core.enums import NameMapping

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Global mapping configuration."""

    model_config = ConfigDict(frozen=True)

    name_mapping: NameMapping = NameMapping.AS_IS
    tag_key: str = "db"
    dialect: Dialect = SQLITE


_settings = Settings()


def get_settings() -> Settings:
    """Return the current process-wide settings."""
    return _settings


def configure(**changes: Any) -> Settings:
    """Replace selected settings and return the new value.

    Example:
        configure(name_mapping=NameMapping.LOWER, dialect=POSTGRESQL)
    """
    global _settings
    _settings = Settings.model_validate({**_settings.model_dump(), **changes})
    logger.debug("row_persist settings updated: %s", _settings)
    return _settings


def reset_settings() -> Settings:
    """Restore default settings."""
    global _settings
    _settings = Settings()
    return _settings
