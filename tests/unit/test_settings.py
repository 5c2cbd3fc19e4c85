"""Unit tests for process-wide settings."""

from __future__ import annotations

from dataclasses import dataclass, field

import pydantic
import pytest

from row_persist.core.dialect import POSTGRESQL, SQLITE
from row_persist.core.enums import NameMapping
from row_persist.core.settings import configure, get_settings, reset_settings
from row_persist.mapping.fields import build_fields


class TestSettings:
    def test_defaults(self) -> None:
        settings = reset_settings()
        assert settings.name_mapping is NameMapping.AS_IS
        assert settings.tag_key == "db"
        assert settings.dialect == SQLITE

    def test_configure_merges(self, restore_settings: None) -> None:
        configure(dialect=POSTGRESQL)
        configure(name_mapping="lower")
        settings = get_settings()
        assert settings.dialect == POSTGRESQL
        assert settings.name_mapping is NameMapping.LOWER

    def test_configure_validates(self, restore_settings: None) -> None:
        with pytest.raises(pydantic.ValidationError):
            configure(name_mapping="kebab")
        assert get_settings().name_mapping is NameMapping.AS_IS

    def test_settings_frozen(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            get_settings().tag_key = "sql"  # type: ignore[misc]

    def test_custom_tag_key(self, restore_settings: None) -> None:
        @dataclass
        class Row:
            UserName: str = field(default="", metadata={"sql": "user_name"})
            Other: str = field(default="", metadata={"db": "ignored"})

        configure(tag_key="sql")
        assert list(build_fields(Row)) == ["user_name", "Other"]

    def test_name_mapping_applies_to_untagged_fields(self, restore_settings: None) -> None:
        @dataclass
        class Row:
            UserName: str = ""
            Tagged: str = field(default="", metadata={"db": "KeepMe"})

        configure(name_mapping=NameMapping.SNAKE_CASE)
        assert list(build_fields(Row)) == ["user_name", "KeepMe"]
